import pytest

from app.verification.state import VerificationOutcome, VerificationState, VerificationStateMachine


def test_attempt_moves_from_idle_through_checking_to_a_result():
    assert VerificationStateMachine.initial_state() == VerificationState.IDLE
    assert VerificationStateMachine.can_transition(VerificationState.IDLE, VerificationState.CHECKING)
    for state in (
        VerificationState.NOT_FOUND,
        VerificationState.ALREADY_VERIFIED,
        VerificationState.SUCCESS,
        VerificationState.ERROR,
    ):
        assert VerificationStateMachine.can_transition(VerificationState.CHECKING, state)
        assert VerificationStateMachine.is_terminal(state)
        assert VerificationStateMachine.can_transition(state, VerificationState.IDLE)


def test_checking_is_not_terminal_and_results_cannot_chain():
    assert not VerificationStateMachine.is_terminal(VerificationState.CHECKING)
    assert not VerificationStateMachine.can_transition(VerificationState.IDLE, VerificationState.SUCCESS)
    assert not VerificationStateMachine.can_transition(VerificationState.SUCCESS, VerificationState.CHECKING)
    with pytest.raises(ValueError):
        VerificationStateMachine.assert_transition(VerificationState.NOT_FOUND, VerificationState.SUCCESS)


def test_every_outcome_maps_to_a_terminal_state():
    for outcome in VerificationOutcome:
        assert VerificationStateMachine.is_terminal(outcome.state)
    assert VerificationOutcome.INCONSISTENT.state == VerificationState.ERROR
    assert VerificationOutcome.TRANSIENT_ERROR.state == VerificationState.ERROR
    assert VerificationOutcome.ALREADY_VERIFIED.state == VerificationState.ALREADY_VERIFIED
