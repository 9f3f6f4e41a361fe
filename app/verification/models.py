from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .state import VerificationOutcome, VerificationState

UNKNOWN_EVENT_NAME = "Unknown Event"


@dataclass(slots=True)
class VerificationStamp:
    """Verification fields shared by the attendee and ticket history copies."""

    verified: bool = False
    verification_date: str | None = None
    verification_time: str | None = None
    verified_by: str | None = None


@dataclass(slots=True)
class AttendeeRecord:
    """Event scoped copy of a purchased ticket, owned by the booker."""

    organizer_uid: str
    event_id: str
    ticket_id: str
    attendee_uid: str | None
    full_name: str | None = None
    email: str | None = None
    ticket_type: str | None = None
    purchase_date: str | None = None
    purchase_time: str | None = None
    ticket_reference: str | None = None
    stamp: VerificationStamp = field(default_factory=VerificationStamp)

    @property
    def verified(self) -> bool:
        return self.stamp.verified


@dataclass(slots=True)
class TicketHistoryRecord:
    """Account scoped copy of a purchased ticket, owned by the attendee."""

    account_uid: str
    ticket_id: str
    event_id: str
    event_name: str | None = None
    ticket_type: str | None = None
    ticket_reference: str | None = None
    purchase_date: str | None = None
    purchase_time: str | None = None
    created_at: datetime | None = None
    stamp: VerificationStamp = field(default_factory=VerificationStamp)

    @property
    def verified(self) -> bool:
        return self.stamp.verified


@dataclass(slots=True)
class TicketView:
    """What the gate screen shows about a scanned ticket."""

    ticket_id: str
    event_id: str
    event_name: str
    attendee_name: str
    attendee_email: str
    ticket_type: str
    purchase_date: str
    purchase_time: str
    ticket_reference: str
    is_verified: bool

    @classmethod
    def from_attendee(
        cls,
        record: AttendeeRecord,
        *,
        event_name: str | None,
        is_verified: bool,
    ) -> "TicketView":
        return cls(
            ticket_id=record.ticket_id,
            event_id=record.event_id,
            event_name=event_name or UNKNOWN_EVENT_NAME,
            attendee_name=record.full_name or "Unknown",
            attendee_email=record.email or "unknown@example.com",
            ticket_type=record.ticket_type or "Standard",
            purchase_date=record.purchase_date or "Unknown",
            purchase_time=record.purchase_time or "Unknown",
            ticket_reference=record.ticket_reference or "",
            is_verified=is_verified,
        )


@dataclass(slots=True)
class VerificationResult:
    """Outcome of one verification attempt."""

    outcome: VerificationOutcome
    message: str
    ticket: TicketView | None = None
    stamp: VerificationStamp | None = None

    @property
    def state(self) -> VerificationState:
        return self.outcome.state
