import pytest

from kton_sdk.core.ton.pool_state import (
    NEWER_SCHEMA_LENGTH,
    OLDER_SCHEMA_LENGTH,
    PoolState,
    RoundState,
    decode_pool_state,
)
from kton_sdk.core.ton.stack import CellRecord, DecodeError, IntRecord, TupleRecord
from kton_sdk.testing.fixtures import MINTER_ADDRESS, STAKING_ADDRESS, build_pool_stack


def test_fixture_stack_lengths_match_schemas():
    assert len(build_pool_stack(newer=True)) == NEWER_SCHEMA_LENGTH
    assert len(build_pool_stack(newer=False)) == OLDER_SCHEMA_LENGTH


def test_decode_newer_schema():
    state = decode_pool_state(build_pool_stack(newer=True))

    assert state.state == 1
    assert state.halted is False
    assert state.total_balance == 10**30
    assert state.interest_rate == 2**16
    assert state.optimistic_deposit_withdrawals is True
    assert state.deposits_open is True
    assert state.instant_withdrawal_fee == 7
    assert state.saved_validator_set_hash == 2**255
    assert state.accrued_governance_fee == 99
    assert state.disbalance_tolerance == 40
    assert state.credit_start_prior_elections_end == 600
    assert state.governance_fee == 2**22
    assert state.pool_jetton_minter == MINTER_ADDRESS
    assert state.pool_jetton_supply == 9 * 10**29
    assert state.supply == state.pool_jetton_supply
    assert state.projected_total_balance == 10**30 + 1
    assert state.projected_pool_supply == 9 * 10**29 + 1


def test_decode_older_schema_uses_defaults():
    state = decode_pool_state(build_pool_stack(newer=False))

    assert state.instant_withdrawal_fee == 0
    assert state.accrued_governance_fee == 0
    assert state.disbalance_tolerance == 30
    assert state.credit_start_prior_elections_end == 0
    # Positions after the optional block still line up.
    assert state.pool_jetton_minter == MINTER_ADDRESS
    assert state.min_loan == 5
    assert state.max_loan == 6
    assert state.requested_for_withdrawal == 12


def test_decode_rounds():
    state = decode_pool_state(build_pool_stack(newer=True))

    assert state.previous_round == RoundState(
        borrowers=None,
        round_id=101,
        active_borrowers=102,
        borrowed=103,
        expected=104,
        returned=105,
        profit=106,
    )
    assert state.current_round.round_id == 201
    assert state.current_round.profit == 206


def test_decode_optional_addresses():
    state = decode_pool_state(build_pool_stack(newer=True))

    assert state.deposit_payout is None  # addr_none
    assert state.withdrawal_payout == STAKING_ADDRESS
    assert state.sudoer is None  # not a cell at all
    assert state.governor == STAKING_ADDRESS
    assert state.interest_manager == STAKING_ADDRESS
    assert state.halter == STAKING_ADDRESS
    assert state.approver == STAKING_ADDRESS


def test_decode_keeps_code_cells_opaque():
    state = decode_pool_state(build_pool_stack(newer=True))

    assert state.controller_code == "0102"
    assert state.jetton_wallet_code == "03"
    assert state.payout_minter_code is None


def test_older_schema_all_zero_and_absent_cells():
    stack = [IntRecord(0)] * OLDER_SCHEMA_LENGTH

    state = decode_pool_state(stack)

    assert state.instant_withdrawal_fee == 0
    assert state.deposit_payout is None
    assert state.disbalance_tolerance == 30
    assert state.pool_jetton_minter is None
    assert state.previous_round == RoundState()
    assert state.current_round == RoundState()


def test_wrong_numeric_kind_reads_as_zero():
    stack = build_pool_stack(
        newer=True,
        total_balance=CellRecord(b"\x00"),
        interest_rate=IntRecord(None),
        halted=TupleRecord(()),
    )

    state = decode_pool_state(stack)

    assert state.total_balance == 0
    assert state.interest_rate == 0
    assert state.halted is False


def test_short_round_tuple_defaults_remaining_fields():
    stack = build_pool_stack(
        newer=True, current_round=TupleRecord((CellRecord(None), IntRecord(9)))
    )

    state = decode_pool_state(stack)

    assert state.current_round.round_id == 9
    assert state.current_round.borrowed == 0


@pytest.mark.parametrize("length", [0, 1, 29])
def test_short_stack_raises(length):
    stack = build_pool_stack(newer=False)[:length]
    with pytest.raises(DecodeError):
        decode_pool_state(stack)


@pytest.mark.parametrize("length", [31, 33, 35])
def test_non_34_lengths_use_older_layout(length):
    stack = build_pool_stack(newer=False) + [IntRecord(123)] * (length - 30)

    state = decode_pool_state(stack)

    assert state.instant_withdrawal_fee == 0
    assert state.disbalance_tolerance == 30
    assert state.saved_validator_set_hash == 2**255


def test_malformed_address_cell_raises():
    stack = build_pool_stack(newer=True, governor=CellRecord(b"\xde\xad\xbe\xef"))
    with pytest.raises(DecodeError):
        decode_pool_state(stack)


def test_dict_round_trip():
    state = decode_pool_state(build_pool_stack(newer=True))
    assert PoolState.from_dict(state.to_dict()) == state
