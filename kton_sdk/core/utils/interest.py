from __future__ import annotations

from kton_sdk.core.constants.base import ROUND_DURATION_S, SECONDS_PER_YEAR
from kton_sdk.core.ton.pool_state import PoolState
from kton_sdk.core.utils.units import from_fixed_24, from_nano

ROUNDS_PER_YEAR = SECONDS_PER_YEAR / ROUND_DURATION_S


def round_roi(state: PoolState) -> float:
    """Per-round return after the governance fee."""
    return from_fixed_24(state.interest_rate) * (1 - from_fixed_24(state.governance_fee))


def current_apy(state: PoolState) -> float:
    # Validators are elected every other round, so only half the rounds earn.
    return round_roi(state) * ROUNDS_PER_YEAR / 2


def tvl(state: PoolState) -> int:
    return (
        state.total_balance
        + state.current_round.borrowed
        + state.previous_round.borrowed
    )


def instant_liquidity(state: PoolState) -> int:
    return state.total_balance - state.requested_for_withdrawal


def exchange_rate(balance: int, supply: int) -> float:
    """TON per pool jetton; 0.0 when nothing is minted."""
    if not supply:
        return 0.0
    return float(from_nano(balance) / from_nano(supply))
