from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from app.core.logging import get_tracer
from app.metrics import VERIFICATION_DURATION, VERIFICATIONS_TOTAL, MetricsRegistry, metrics_registry, track_duration
from app.services.postgres import TRANSIENT_ERRORS

from .models import AttendeeRecord, TicketHistoryRecord, TicketView, VerificationResult, VerificationStamp
from .repository import TicketAlreadyVerifiedError, TicketHistoryMissingError, TicketStore
from .state import VerificationOutcome, VerificationState, VerificationStateMachine

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "This ticket ID is not associated with this event."
INVALID_DATA_MESSAGE = "Invalid ticket data: User ID not found."
INCONSISTENT_MESSAGE = "Ticket not found in user's history. Data inconsistency detected."
SUCCESS_MESSAGE = "Ticket verified. Attendee may enter."
TRANSIENT_MESSAGE = "An error occurred while verifying the ticket. Please try again."


class VerificationServiceError(RuntimeError):
    """Base error for ticket verification service issues."""


class VerificationRequestError(VerificationServiceError):
    """Raised when a verification request is missing a required identifier."""


class AttendeeNotFoundError(VerificationServiceError):
    """Raised when an attendee record could not be located."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require(value: str | None, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise VerificationRequestError(f"{label} is required")
    return cleaned


def format_display_date(moment: datetime) -> str:
    """Render ``moment`` as ``M/D/YYYY``."""

    return f"{moment.month}/{moment.day}/{moment.year}"


def format_display_time(moment: datetime) -> str:
    """Render ``moment`` as ``H:MM:SS AM``."""

    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}"


@dataclass(slots=True)
class TicketVerificationService:
    """Check a scanned ticket against both of its copies and stamp them."""

    store: TicketStore
    timezone: str = "UTC"
    clock: Callable[[], datetime] = _utcnow
    metrics: MetricsRegistry = field(default_factory=lambda: metrics_registry)
    tracer: trace.Tracer = field(default_factory=get_tracer)
    _zone: ZoneInfo = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            self._zone = ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise VerificationServiceError(f"Unknown verification timezone: {self.timezone!r}") from exc

    def build_stamp(self, actor_uid: str) -> VerificationStamp:
        moment = self.clock().astimezone(self._zone)
        return VerificationStamp(
            verified=True,
            verification_date=format_display_date(moment),
            verification_time=format_display_time(moment),
            verified_by=actor_uid,
        )

    async def verify_ticket(
        self,
        *,
        organizer_uid: str,
        event_id: str,
        ticket_id: str,
        actor_uid: str,
    ) -> VerificationResult:
        organizer_uid = _require(organizer_uid, "Organizer ID")
        event_id = _require(event_id, "Event ID")
        ticket_id = _require(ticket_id, "Ticket ID")
        actor_uid = _require(actor_uid, "Actor ID")

        state = VerificationStateMachine.initial_state()
        VerificationStateMachine.assert_transition(state, VerificationState.CHECKING)
        state = VerificationState.CHECKING

        duration = self.metrics.distribution(VERIFICATION_DURATION)
        with self.tracer.start_as_current_span("verify_ticket") as span, track_duration(duration):
            span.set_attribute("event.id", event_id)
            span.set_attribute("ticket.id", ticket_id)
            try:
                result = await self._check_and_stamp(
                    organizer_uid=organizer_uid,
                    event_id=event_id,
                    ticket_id=ticket_id,
                    actor_uid=actor_uid,
                )
            except TRANSIENT_ERRORS as exc:
                logger.exception("Store failure while verifying ticket %s for event %s", ticket_id, event_id)
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR, "ticket store unavailable"))
                result = VerificationResult(outcome=VerificationOutcome.TRANSIENT_ERROR, message=TRANSIENT_MESSAGE)
            span.set_attribute("ticket.outcome", result.outcome.value)

        VerificationStateMachine.assert_transition(state, result.state)
        self.metrics.counter(VERIFICATIONS_TOTAL, label_names=("outcome",)).inc(
            labels={"outcome": result.outcome.value}
        )
        logger.info(
            "Ticket %s for event %s verified by %s: %s",
            ticket_id,
            event_id,
            actor_uid,
            result.outcome.value,
        )
        return result

    async def _check_and_stamp(
        self,
        *,
        organizer_uid: str,
        event_id: str,
        ticket_id: str,
        actor_uid: str,
    ) -> VerificationResult:
        attendee = await self.store.get_attendee(organizer_uid, event_id, ticket_id)
        if attendee is None:
            return VerificationResult(outcome=VerificationOutcome.NOT_FOUND, message=NOT_FOUND_MESSAGE)

        if not attendee.attendee_uid:
            logger.warning("Attendee record %s/%s has no account back-reference", event_id, ticket_id)
            return VerificationResult(outcome=VerificationOutcome.INVALID_DATA, message=INVALID_DATA_MESSAGE)

        if attendee.verified:
            return await self._already_verified(attendee)

        history = await self.store.get_ticket_history(attendee.attendee_uid, ticket_id)
        if history is None:
            logger.error(
                "Ticket %s is missing from the history of account %s", ticket_id, attendee.attendee_uid
            )
            return VerificationResult(outcome=VerificationOutcome.INCONSISTENT, message=INCONSISTENT_MESSAGE)

        stamp = self.build_stamp(actor_uid)
        try:
            await self.store.mark_verified(
                organizer_uid=organizer_uid,
                event_id=event_id,
                ticket_id=ticket_id,
                attendee_uid=attendee.attendee_uid,
                stamp=stamp,
            )
        except TicketAlreadyVerifiedError:
            logger.info("Ticket %s was verified by a concurrent scan", ticket_id)
            current = await self.store.get_attendee(organizer_uid, event_id, ticket_id)
            return await self._already_verified(current or attendee)
        except TicketHistoryMissingError:
            logger.error("Ticket %s history record disappeared before commit", ticket_id)
            return VerificationResult(outcome=VerificationOutcome.INCONSISTENT, message=INCONSISTENT_MESSAGE)

        event_name = await self.store.get_event_name(organizer_uid, event_id)
        return VerificationResult(
            outcome=VerificationOutcome.SUCCESS,
            message=SUCCESS_MESSAGE,
            ticket=TicketView.from_attendee(attendee, event_name=event_name, is_verified=False),
            stamp=stamp,
        )

    async def _already_verified(self, attendee: AttendeeRecord) -> VerificationResult:
        event_name = await self.store.get_event_name(attendee.organizer_uid, attendee.event_id)
        stamp = attendee.stamp
        if stamp.verification_date and stamp.verification_time:
            message = f"Ticket already verified on {stamp.verification_date} at {stamp.verification_time}."
        else:
            message = "Ticket already verified."
        return VerificationResult(
            outcome=VerificationOutcome.ALREADY_VERIFIED,
            message=message,
            ticket=TicketView.from_attendee(attendee, event_name=event_name, is_verified=True),
        )

    async def preview_ticket(self, *, organizer_uid: str, event_id: str, ticket_id: str) -> TicketView:
        ticket_id = _require(ticket_id, "Ticket ID")
        attendee = await self.store.get_attendee(organizer_uid, event_id, ticket_id)
        if attendee is None:
            raise AttendeeNotFoundError(f"Ticket {ticket_id} not found for event {event_id}")
        event_name = await self.store.get_event_name(organizer_uid, event_id)
        return TicketView.from_attendee(attendee, event_name=event_name, is_verified=attendee.verified)

    async def list_ticket_history(self, account_uid: str) -> list[TicketHistoryRecord]:
        return await self.store.list_ticket_history(account_uid)
