"""Message bodies for staking pool operations."""

from __future__ import annotations

import base64

from pytoniq_core import Address, Cell, begin_cell

from kton_sdk.core.constants.base import OP_STAKE, OP_UNSTAKE


def _to_base64(cell: Cell) -> str:
    return base64.b64encode(cell.to_boc()).decode("ascii")


def build_stake_payload(partner_code: int, *, query_id: int = 1) -> str:
    cell = (
        begin_cell()
        .store_uint(OP_STAKE, 32)
        .store_uint(query_id, 64)
        .store_uint(partner_code, 64)
        .end_cell()
    )
    return _to_base64(cell)


def build_unstake_payload(
    amount_nano: int,
    response_address: str,
    *,
    wait_till_round_end: bool = False,
    fill_or_kill: bool = False,
    query_id: int = 0,
) -> str:
    """Burn ``amount_nano`` pool jettons.

    ``wait_till_round_end`` asks for the end-of-round rate, ``fill_or_kill``
    only succeeds when the pool can pay out immediately.
    """
    custom = (
        begin_cell()
        .store_uint(int(wait_till_round_end), 1)
        .store_uint(int(fill_or_kill), 1)
        .end_cell()
    )
    cell = (
        begin_cell()
        .store_uint(OP_UNSTAKE, 32)
        .store_uint(query_id, 64)
        .store_coins(amount_nano)
        .store_address(Address(response_address))
        .store_maybe_ref(custom)
        .end_cell()
    )
    return _to_base64(cell)
