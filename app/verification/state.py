from __future__ import annotations

from enum import Enum


class VerificationState(str, Enum):
    """Lifecycle of a single verification attempt as seen by the gate UI."""

    IDLE = "idle"
    CHECKING = "checking"
    NOT_FOUND = "not-found"
    ALREADY_VERIFIED = "already-verified"
    SUCCESS = "success"
    ERROR = "error"


class VerificationOutcome(str, Enum):
    """Tagged result of the verification protocol."""

    NOT_FOUND = "not_found"
    INVALID_DATA = "invalid_data"
    INCONSISTENT = "inconsistent"
    ALREADY_VERIFIED = "already_verified"
    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"

    @property
    def state(self) -> VerificationState:
        return _OUTCOME_STATES[self]


_OUTCOME_STATES: dict[VerificationOutcome, VerificationState] = {
    VerificationOutcome.NOT_FOUND: VerificationState.NOT_FOUND,
    VerificationOutcome.INVALID_DATA: VerificationState.ERROR,
    VerificationOutcome.INCONSISTENT: VerificationState.ERROR,
    VerificationOutcome.ALREADY_VERIFIED: VerificationState.ALREADY_VERIFIED,
    VerificationOutcome.SUCCESS: VerificationState.SUCCESS,
    VerificationOutcome.TRANSIENT_ERROR: VerificationState.ERROR,
}

_TERMINAL = frozenset(
    {
        VerificationState.NOT_FOUND,
        VerificationState.ALREADY_VERIFIED,
        VerificationState.SUCCESS,
        VerificationState.ERROR,
    }
)


class VerificationStateMachine:
    """Validate verification attempt transitions."""

    _TRANSITIONS: dict[VerificationState, set[VerificationState]] = {
        VerificationState.IDLE: {VerificationState.CHECKING},
        VerificationState.CHECKING: set(_TERMINAL),
        VerificationState.NOT_FOUND: {VerificationState.IDLE},
        VerificationState.ALREADY_VERIFIED: {VerificationState.IDLE},
        VerificationState.SUCCESS: {VerificationState.IDLE},
        VerificationState.ERROR: {VerificationState.IDLE},
    }

    @classmethod
    def initial_state(cls) -> VerificationState:
        return VerificationState.IDLE

    @classmethod
    def is_terminal(cls, state: VerificationState) -> bool:
        return state in _TERMINAL

    @classmethod
    def can_transition(cls, current: VerificationState, new: VerificationState) -> bool:
        return new in cls._TRANSITIONS.get(current, set())

    @classmethod
    def assert_transition(cls, current: VerificationState, new: VerificationState) -> None:
        if not cls.can_transition(current, new):
            raise ValueError(f"Invalid verification state transition: {current.value} -> {new.value}")
