from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from app.verification.models import AttendeeRecord, TicketHistoryRecord, VerificationStamp
from app.verification.repository import TicketAlreadyVerifiedError, TicketHistoryMissingError


def _copy_attendee(record: AttendeeRecord) -> AttendeeRecord:
    return replace(record, stamp=replace(record.stamp))


def _copy_history(record: TicketHistoryRecord) -> TicketHistoryRecord:
    return replace(record, stamp=replace(record.stamp))


class InMemoryTicketStore:
    """Dict backed store with the same contract as ``TicketStore``.

    Reads yield to the event loop so concurrent verifications interleave the
    way they would against the database; ``mark_verified`` applies both
    stamps without yielding, like a committed transaction.
    """

    def __init__(self) -> None:
        self.events: dict[tuple[str, str], str] = {}
        self.attendees: dict[tuple[str, str, str], AttendeeRecord] = {}
        self.history: dict[tuple[str, str], TicketHistoryRecord] = {}
        self.writes: list[tuple[str, str, VerificationStamp]] = []

    def add_event(self, organizer_uid: str, event_id: str, name: str) -> None:
        self.events[(organizer_uid, event_id)] = name

    def add_attendee(self, record: AttendeeRecord) -> AttendeeRecord:
        self.attendees[(record.organizer_uid, record.event_id, record.ticket_id)] = record
        return record

    def add_history(self, record: TicketHistoryRecord) -> TicketHistoryRecord:
        self.history[(record.account_uid, record.ticket_id)] = record
        return record

    async def get_attendee(self, organizer_uid: str, event_id: str, ticket_id: str) -> AttendeeRecord | None:
        await asyncio.sleep(0)
        record = self.attendees.get((organizer_uid, event_id, ticket_id))
        return None if record is None else _copy_attendee(record)

    async def get_ticket_history(self, account_uid: str, ticket_id: str) -> TicketHistoryRecord | None:
        await asyncio.sleep(0)
        record = self.history.get((account_uid, ticket_id))
        return None if record is None else _copy_history(record)

    async def list_ticket_history(self, account_uid: str) -> list[TicketHistoryRecord]:
        records = [record for (owner, _), record in self.history.items() if owner == account_uid]
        records.sort(key=lambda record: record.created_at, reverse=True)
        return [_copy_history(record) for record in records]

    async def get_event_name(self, organizer_uid: str, event_id: str) -> str | None:
        return self.events.get((organizer_uid, event_id))

    async def mark_verified(
        self,
        *,
        organizer_uid: str,
        event_id: str,
        ticket_id: str,
        attendee_uid: str,
        stamp: VerificationStamp,
    ) -> None:
        await asyncio.sleep(0)
        attendee = self.attendees.get((organizer_uid, event_id, ticket_id))
        if attendee is None or attendee.verified:
            raise TicketAlreadyVerifiedError(ticket_id)
        history = self.history.get((attendee_uid, ticket_id))
        if history is None:
            raise TicketHistoryMissingError(ticket_id)
        attendee.stamp = replace(stamp)
        history.stamp = replace(stamp)
        self.writes.append(("event_attendees", ticket_id, stamp))
        self.writes.append(("ticket_history", ticket_id, stamp))


class FailingTicketStore(InMemoryTicketStore):
    def __init__(self, error: BaseException) -> None:
        super().__init__()
        self.error = error

    async def get_attendee(self, organizer_uid: str, event_id: str, ticket_id: str) -> AttendeeRecord | None:
        raise self.error


@pytest.fixture
def store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def fixed_clock():
    moment = datetime(2026, 10, 19, 15, 4, 5, tzinfo=timezone.utc)
    return lambda: moment


def _make_attendee(
    ticket_id: str = "T1",
    *,
    attendee_uid: str | None = "u1",
    verified: bool = False,
    organizer_uid: str = "booker-1",
    event_id: str = "event-1",
) -> AttendeeRecord:
    stamp = VerificationStamp()
    if verified:
        stamp = VerificationStamp(
            verified=True,
            verification_date="10/18/2026",
            verification_time="8:15:00 PM",
            verified_by="booker-1",
        )
    return AttendeeRecord(
        organizer_uid=organizer_uid,
        event_id=event_id,
        ticket_id=ticket_id,
        attendee_uid=attendee_uid,
        full_name="Ada Obi",
        email="ada@example.com",
        ticket_type="VIP",
        purchase_date="10/01/2026",
        purchase_time="9:00:00 AM",
        ticket_reference="SPX-0001",
        stamp=stamp,
    )


def _make_history(ticket_id: str = "T1", *, account_uid: str = "u1", verified: bool = False) -> TicketHistoryRecord:
    return TicketHistoryRecord(
        account_uid=account_uid,
        ticket_id=ticket_id,
        event_id="event-1",
        event_name="Lagos Night Fest",
        ticket_type="VIP",
        ticket_reference="SPX-0001",
        purchase_date="10/01/2026",
        purchase_time="9:00:00 AM",
        created_at=datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc),
        stamp=VerificationStamp(verified=verified),
    )


@pytest.fixture
def make_attendee():
    return _make_attendee


@pytest.fixture
def make_history():
    return _make_history


@pytest.fixture
def seeded_store(store: InMemoryTicketStore) -> InMemoryTicketStore:
    """Event with one unverified ticket ``T1`` owned by account ``u1``."""

    store.add_event("booker-1", "event-1", "Lagos Night Fest")
    store.add_attendee(_make_attendee("T1"))
    store.add_history(_make_history("T1"))
    return store


@pytest.fixture
def failing_store():
    return FailingTicketStore
