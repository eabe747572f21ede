"""Decoder for the staking pool's ``get_pool_full_data`` stack.

Fields are read strictly by position. The layout has two versions and the
only way to tell them apart is the stack length: 34 records is the newer
contract, anything else is read with the older layout. Rates and fees are
returned as raw 2**24 fixed-point integers.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from kton_sdk.core.ton.address import read_address, read_address_any
from kton_sdk.core.ton.stack import (
    CellRecord,
    DecodeError,
    IntRecord,
    StackCursor,
    StackRecord,
    TupleRecord,
)

NEWER_SCHEMA_LENGTH = 34
OLDER_SCHEMA_LENGTH = 30
DEFAULT_DISBALANCE_TOLERANCE = 30

__all__ = [
    "DecodeError",
    "PoolState",
    "RoundState",
    "decode_pool_state",
]


@dataclass(frozen=True)
class RoundState:
    borrowers: str | None = None
    round_id: int = 0
    active_borrowers: int = 0
    borrowed: int = 0
    expected: int = 0
    returned: int = 0
    profit: int = 0


@dataclass(frozen=True)
class PoolState:
    state: int
    halted: bool
    total_balance: int
    interest_rate: int
    optimistic_deposit_withdrawals: bool
    deposits_open: bool
    instant_withdrawal_fee: int
    saved_validator_set_hash: int
    previous_round: RoundState
    current_round: RoundState
    min_loan: int
    max_loan: int
    governance_fee: int
    accrued_governance_fee: int
    disbalance_tolerance: int
    credit_start_prior_elections_end: int
    pool_jetton_minter: str | None
    pool_jetton_supply: int
    deposit_payout: str | None
    requested_for_deposit: int
    withdrawal_payout: str | None
    requested_for_withdrawal: int
    sudoer: str | None
    sudoer_set_at: int
    governor: str | None
    governor_update_after: int
    interest_manager: str | None
    halter: str | None
    approver: str | None
    controller_code: str | None
    jetton_wallet_code: str | None
    payout_minter_code: str | None
    projected_total_balance: int
    projected_pool_supply: int

    @property
    def supply(self) -> int:
        return self.pool_jetton_supply

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PoolState:
        values = dict(data)
        values["previous_round"] = RoundState(**values["previous_round"])
        values["current_round"] = RoundState(**values["current_round"])
        return cls(**values)


def _int(record: StackRecord | None) -> int:
    if isinstance(record, IntRecord) and record.value is not None:
        return record.value
    return 0


def _bool(record: StackRecord | None) -> bool:
    return bool(_int(record))


def _cell(record: StackRecord | None) -> str | None:
    if isinstance(record, CellRecord):
        return record.hex
    return None


def _address(record: StackRecord | None) -> str | None:
    if isinstance(record, CellRecord) and record.data:
        return read_address(record.data)
    return None


def _address_any(record: StackRecord | None) -> str | None:
    if isinstance(record, CellRecord) and record.data:
        return read_address_any(record.data)
    return None


@dataclass(frozen=True)
class FieldSpec:
    name: str
    read: Callable[[StackRecord | None], Any]
    newer_only: bool = False
    default: Any = None


ROUND_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("borrowers", _cell),
    FieldSpec("round_id", _int),
    FieldSpec("active_borrowers", _int),
    FieldSpec("borrowed", _int),
    FieldSpec("expected", _int),
    FieldSpec("returned", _int),
    FieldSpec("profit", _int),
)


def _round(record: StackRecord | None) -> RoundState:
    # A missing or non-tuple round reads as an empty one.
    items = record.items if isinstance(record, TupleRecord) else ()
    cursor = StackCursor(items)
    return RoundState(
        **{field.name: field.read(cursor.next()) for field in ROUND_FIELDS}
    )


POOL_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("state", _int),
    FieldSpec("halted", _bool),
    FieldSpec("total_balance", _int),
    FieldSpec("interest_rate", _int),
    FieldSpec("optimistic_deposit_withdrawals", _bool),
    FieldSpec("deposits_open", _bool),
    FieldSpec("instant_withdrawal_fee", _int, newer_only=True, default=0),
    FieldSpec("saved_validator_set_hash", _int),
    FieldSpec("previous_round", _round),
    FieldSpec("current_round", _round),
    FieldSpec("min_loan", _int),
    FieldSpec("max_loan", _int),
    FieldSpec("governance_fee", _int),
    FieldSpec("accrued_governance_fee", _int, newer_only=True, default=0),
    FieldSpec(
        "disbalance_tolerance",
        _int,
        newer_only=True,
        default=DEFAULT_DISBALANCE_TOLERANCE,
    ),
    FieldSpec("credit_start_prior_elections_end", _int, newer_only=True, default=0),
    FieldSpec("pool_jetton_minter", _address),
    FieldSpec("pool_jetton_supply", _int),
    FieldSpec("deposit_payout", _address_any),
    FieldSpec("requested_for_deposit", _int),
    FieldSpec("withdrawal_payout", _address_any),
    FieldSpec("requested_for_withdrawal", _int),
    FieldSpec("sudoer", _address_any),
    FieldSpec("sudoer_set_at", _int),
    FieldSpec("governor", _address),
    FieldSpec("governor_update_after", _int),
    FieldSpec("interest_manager", _address),
    FieldSpec("halter", _address),
    FieldSpec("approver", _address),
    FieldSpec("controller_code", _cell),
    FieldSpec("jetton_wallet_code", _cell),
    FieldSpec("payout_minter_code", _cell),
    FieldSpec("projected_total_balance", _int),
    FieldSpec("projected_pool_supply", _int),
)


def is_newer_schema(records: Sequence[StackRecord]) -> bool:
    return len(records) == NEWER_SCHEMA_LENGTH


def decode_pool_state(records: Sequence[StackRecord]) -> PoolState:
    """Decode a ``get_pool_full_data`` stack into a :class:`PoolState`.

    Raises:
        DecodeError: if the stack is shorter than the layout requires or an
            address cell is malformed. Numeric fields of the wrong type read
            as zero and absent address cells read as ``None``.
    """
    newer = is_newer_schema(records)
    cursor = StackCursor(records)
    values: dict[str, Any] = {}
    for field in POOL_FIELDS:
        if field.newer_only and not newer:
            values[field.name] = field.default
            continue
        values[field.name] = field.read(cursor.next_required(field.name))
    return PoolState(**values)
