"""Ticket verification domain models and services."""

from .models import AttendeeRecord, TicketHistoryRecord, TicketView, VerificationResult, VerificationStamp
from .repository import TicketAlreadyVerifiedError, TicketHistoryMissingError, TicketStore
from .service import AttendeeNotFoundError, TicketVerificationService, VerificationRequestError
from .state import VerificationOutcome, VerificationState, VerificationStateMachine

__all__ = [
    "AttendeeNotFoundError",
    "AttendeeRecord",
    "TicketAlreadyVerifiedError",
    "TicketHistoryMissingError",
    "TicketHistoryRecord",
    "TicketStore",
    "TicketVerificationService",
    "TicketView",
    "VerificationOutcome",
    "VerificationRequestError",
    "VerificationResult",
    "VerificationStamp",
    "VerificationState",
    "VerificationStateMachine",
]
