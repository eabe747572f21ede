import base64

import pytest
from pytoniq_core import Address, Cell, begin_cell

from kton_sdk.core.constants.base import OP_STAKE, OP_UNSTAKE
from kton_sdk.core.ton.address import (
    read_address,
    read_address_any,
    to_raw_address,
    to_readable_address,
)
from kton_sdk.core.ton.payloads import build_stake_payload, build_unstake_payload
from kton_sdk.core.ton.stack import DecodeError
from kton_sdk.testing.fixtures import (
    MINTER_ADDRESS,
    STAKING_ADDRESS,
    addr_none_cell,
    address_cell,
)


def test_raw_and_readable_forms_round_trip():
    raw = to_raw_address(STAKING_ADDRESS)

    assert raw.startswith("0:")
    assert to_readable_address(raw) == STAKING_ADDRESS


def test_to_readable_address_returns_garbage_unchanged():
    assert to_readable_address("not-an-address") == "not-an-address"


def test_read_address():
    assert read_address(address_cell(MINTER_ADDRESS)) == MINTER_ADDRESS
    assert read_address(addr_none_cell()) is None


def test_read_address_any_handles_extern():
    extern = begin_cell().store_uint(0b01, 2).store_uint(8, 9).store_uint(200, 8)

    assert read_address_any(extern.end_cell().to_boc()) == "External<8:200>"
    assert read_address_any(addr_none_cell()) is None
    assert read_address_any(address_cell(STAKING_ADDRESS)) == STAKING_ADDRESS


def test_read_address_rejects_bad_boc():
    with pytest.raises(DecodeError):
        read_address(b"\x00\x01")


def _parse(payload: str):
    return Cell.one_from_boc(base64.b64decode(payload)).begin_parse()


def test_stake_payload_layout():
    cs = _parse(build_stake_payload(0x000000000005B7CE))

    assert cs.load_uint(32) == OP_STAKE
    assert cs.load_uint(64) == 1
    assert cs.load_uint(64) == 0x5B7CE


def test_unstake_payload_layout():
    payload = build_unstake_payload(
        1_500_000_000,
        STAKING_ADDRESS,
        wait_till_round_end=True,
        fill_or_kill=False,
    )

    cs = _parse(payload)

    assert cs.load_uint(32) == OP_UNSTAKE
    assert cs.load_uint(64) == 0
    assert cs.load_coins() == 1_500_000_000
    assert cs.load_address() == Address(STAKING_ADDRESS)
    custom = cs.load_maybe_ref().begin_parse()
    assert custom.load_uint(1) == 1
    assert custom.load_uint(1) == 0
