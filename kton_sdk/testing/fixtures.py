"""Shared pytest fixtures and stack builders."""

import copy

import pytest
from pytoniq_core import Address, begin_cell

import kton_sdk.core.config as config
from kton_sdk.core.cache.stores import MemoryStore
from kton_sdk.core.cache.ttl_cache import TtlCache
from kton_sdk.core.ton.stack import CellRecord, IntRecord, StackRecord, TupleRecord

STAKING_ADDRESS = "EQA9HwEZD_tONfVz6lJS0PVKR5viEiEGyj9AuQewGQVnXPg0"
MINTER_ADDRESS = "EQDsW2P6nuP1zopKoNiCYj2xhqDan0cBuULQ8MH4o7dBt_7a"


def address_cell(address: str) -> bytes:
    return begin_cell().store_address(Address(address)).end_cell().to_boc()


def addr_none_cell() -> bytes:
    return begin_cell().store_uint(0, 2).end_cell().to_boc()


def _round(base: int) -> TupleRecord:
    return TupleRecord(
        (
            CellRecord(None),
            IntRecord(base + 1),
            IntRecord(base + 2),
            IntRecord(base + 3),
            IntRecord(base + 4),
            IntRecord(base + 5),
            IntRecord(base + 6),
        )
    )


def build_pool_stack(*, newer: bool, **overrides: StackRecord) -> list[StackRecord]:
    """Stack in ``get_pool_full_data`` order with recognisable values."""
    fields: list[tuple[str, StackRecord]] = [
        ("state", IntRecord(1)),
        ("halted", IntRecord(0)),
        ("total_balance", IntRecord(10**30)),
        ("interest_rate", IntRecord(2**16)),
        ("optimistic_deposit_withdrawals", IntRecord(1)),
        ("deposits_open", IntRecord(-1)),
    ]
    if newer:
        fields.append(("instant_withdrawal_fee", IntRecord(7)))
    fields += [
        ("saved_validator_set_hash", IntRecord(2**255)),
        ("previous_round", _round(100)),
        ("current_round", _round(200)),
        ("min_loan", IntRecord(5)),
        ("max_loan", IntRecord(6)),
        ("governance_fee", IntRecord(2**22)),
    ]
    if newer:
        fields += [
            ("accrued_governance_fee", IntRecord(99)),
            ("disbalance_tolerance", IntRecord(40)),
            ("credit_start_prior_elections_end", IntRecord(600)),
        ]
    fields += [
        ("pool_jetton_minter", CellRecord(address_cell(MINTER_ADDRESS))),
        ("pool_jetton_supply", IntRecord(9 * 10**29)),
        ("deposit_payout", CellRecord(addr_none_cell())),
        ("requested_for_deposit", IntRecord(11)),
        ("withdrawal_payout", CellRecord(address_cell(STAKING_ADDRESS))),
        ("requested_for_withdrawal", IntRecord(12)),
        ("sudoer", IntRecord(None)),
        ("sudoer_set_at", IntRecord(13)),
        ("governor", CellRecord(address_cell(STAKING_ADDRESS))),
        ("governor_update_after", IntRecord(14)),
        ("interest_manager", CellRecord(address_cell(STAKING_ADDRESS))),
        ("halter", CellRecord(address_cell(STAKING_ADDRESS))),
        ("approver", CellRecord(address_cell(STAKING_ADDRESS))),
        ("controller_code", CellRecord(b"\x01\x02")),
        ("jetton_wallet_code", CellRecord(b"\x03")),
        ("payout_minter_code", CellRecord(None)),
        ("projected_total_balance", IntRecord(10**30 + 1)),
        ("projected_pool_supply", IntRecord(9 * 10**29 + 1)),
    ]
    return [overrides.get(name, record) for name, record in fields]


def to_stack_json(records: list[StackRecord]) -> list[dict]:
    """Render records the way tonapi returns them."""
    out: list[dict] = []
    for record in records:
        if isinstance(record, TupleRecord):
            out.append({"type": "tuple", "tuple": to_stack_json(list(record.items))})
        elif isinstance(record, CellRecord) and record.data is not None:
            out.append({"type": "cell", "cell": record.data.hex()})
        elif isinstance(record, IntRecord) and record.value is not None:
            out.append({"type": "num", "num": hex(record.value)})
        else:
            out.append({"type": "null"})
    return out


class FakeClock:
    """Wall clock in seconds, advanced in whole milliseconds."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms / 1000

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def restore_global_config():
    original = copy.deepcopy(config.CONFIG)
    yield
    config.set_config(original)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ttl_cache(store: MemoryStore, clock: FakeClock) -> TtlCache:
    return TtlCache(1000, "prefix-", store=store, clock=clock)
