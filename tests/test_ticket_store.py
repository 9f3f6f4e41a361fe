from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.verification.models import VerificationStamp
from app.verification.repository import (
    TicketAlreadyVerifiedError,
    TicketHistoryMissingError,
    TicketStore,
)


class DummyAcquire:
    def __init__(self, connection):
        self._connection = connection

    async def __aenter__(self):
        return self._connection

    async def __aexit__(self, exc_type, exc, tb):
        return False


class DummyPool:
    def __init__(self, connection):
        self._connection = connection

    def acquire(self):
        return DummyAcquire(self._connection)


class DummyTransaction:
    def __init__(self):
        self.entered = False
        self.exit_exc_type = None

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exit_exc_type = exc_type
        return False


def _connection(execute_results=None):
    connection = AsyncMock()
    transaction = DummyTransaction()
    connection.transaction = MagicMock(return_value=transaction)
    if execute_results is not None:
        connection.execute = AsyncMock(side_effect=execute_results)
    return connection, transaction


STAMP = VerificationStamp(
    verified=True,
    verification_date="10/19/2026",
    verification_time="3:04:05 PM",
    verified_by="booker-1",
)


def _attendee_row(**overrides):
    row = {
        "organizer_uid": "booker-1",
        "event_id": "event-1",
        "ticket_id": "T1",
        "attendee_uid": "u1",
        "full_name": "Ada Obi",
        "email": "ada@example.com",
        "ticket_type": "VIP",
        "purchase_date": "10/01/2026",
        "purchase_time": "9:00:00 AM",
        "ticket_reference": "SPX-0001",
        "verified": False,
        "verification_date": None,
        "verification_time": None,
        "verified_by": None,
    }
    row.update(overrides)
    return row


async def _mark(repository: TicketStore) -> None:
    await repository.mark_verified(
        organizer_uid="booker-1",
        event_id="event-1",
        ticket_id="T1",
        attendee_uid="u1",
        stamp=STAMP,
    )


@pytest.mark.asyncio
async def test_ensure_schema_creates_tables():
    connection, _ = _connection()
    repository = TicketStore(DummyPool(connection))

    await repository.ensure_schema()

    executed = [call.args[0] for call in connection.execute.await_args_list]
    assert len(executed) == 3
    assert "CREATE TABLE IF NOT EXISTS booker_events" in executed[0]
    assert "CREATE TABLE IF NOT EXISTS event_attendees" in executed[1]
    assert "CREATE TABLE IF NOT EXISTS ticket_history" in executed[2]


@pytest.mark.asyncio
async def test_get_attendee_maps_row():
    connection, _ = _connection()
    connection.fetchrow = AsyncMock(return_value=_attendee_row(attendee_uid=None))
    repository = TicketStore(DummyPool(connection))

    record = await repository.get_attendee("booker-1", "event-1", "T1")

    assert record is not None
    assert record.attendee_uid is None
    assert record.full_name == "Ada Obi"
    assert record.verified is False
    assert connection.fetchrow.await_args.args[1:] == ("booker-1", "event-1", "T1")


@pytest.mark.asyncio
async def test_get_attendee_returns_none_when_absent():
    connection, _ = _connection()
    connection.fetchrow = AsyncMock(return_value=None)
    repository = TicketStore(DummyPool(connection))

    assert await repository.get_attendee("booker-1", "event-1", "T404") is None


@pytest.mark.asyncio
async def test_list_ticket_history_maps_rows():
    now = datetime.now(timezone.utc)
    row = {
        "account_uid": "u1",
        "ticket_id": "T1",
        "event_id": "event-1",
        "event_name": "Lagos Night Fest",
        "ticket_type": "VIP",
        "ticket_reference": "SPX-0001",
        "purchase_date": "10/01/2026",
        "purchase_time": "9:00:00 AM",
        "created_at": now,
        "verified": True,
        "verification_date": "10/19/2026",
        "verification_time": "3:04:05 PM",
        "verified_by": "booker-1",
    }
    connection, _ = _connection()
    connection.fetch = AsyncMock(return_value=[row])
    repository = TicketStore(DummyPool(connection))

    records = await repository.list_ticket_history("u1")

    assert len(records) == 1
    assert records[0].verified is True
    assert records[0].stamp.verified_by == "booker-1"
    assert records[0].created_at == now


@pytest.mark.asyncio
async def test_get_event_name_returns_none_for_blank_name():
    connection, _ = _connection()
    connection.fetchval = AsyncMock(return_value="")
    repository = TicketStore(DummyPool(connection))

    assert await repository.get_event_name("booker-1", "event-1") is None


@pytest.mark.asyncio
async def test_mark_verified_updates_both_copies_in_one_transaction():
    connection, transaction = _connection(["UPDATE 1", "UPDATE 1"])
    repository = TicketStore(DummyPool(connection))

    await _mark(repository)

    assert transaction.entered is True
    assert transaction.exit_exc_type is None
    attendee_call, history_call = connection.execute.await_args_list
    assert "UPDATE event_attendees" in attendee_call.args[0]
    assert "verified = FALSE" in attendee_call.args[0]
    assert attendee_call.args[1:] == ("booker-1", "event-1", "T1", "10/19/2026", "3:04:05 PM", "booker-1")
    assert "UPDATE ticket_history" in history_call.args[0]
    assert history_call.args[1:] == ("u1", "T1", "10/19/2026", "3:04:05 PM", "booker-1")


@pytest.mark.asyncio
async def test_mark_verified_rolls_back_when_attendee_already_verified():
    connection, transaction = _connection(["UPDATE 0"])
    repository = TicketStore(DummyPool(connection))

    with pytest.raises(TicketAlreadyVerifiedError):
        await _mark(repository)

    assert connection.execute.await_count == 1
    assert transaction.exit_exc_type is TicketAlreadyVerifiedError


@pytest.mark.asyncio
async def test_mark_verified_rolls_back_when_history_missing():
    connection, transaction = _connection(["UPDATE 1", "UPDATE 0"])
    repository = TicketStore(DummyPool(connection))

    with pytest.raises(TicketHistoryMissingError):
        await _mark(repository)

    assert connection.execute.await_count == 2
    assert transaction.exit_exc_type is TicketHistoryMissingError


@pytest.mark.asyncio
async def test_list_ticket_history_returns_newest_purchase_first():
    older = datetime(2026, 9, 1, tzinfo=timezone.utc)
    newer = datetime(2026, 10, 1, tzinfo=timezone.utc)

    def _row(ticket_id, created_at):
        return {
            "account_uid": "u1",
            "ticket_id": ticket_id,
            "event_id": "event-1",
            "event_name": None,
            "ticket_type": None,
            "ticket_reference": None,
            "purchase_date": None,
            "purchase_time": None,
            "created_at": created_at,
            "verified": False,
            "verification_date": None,
            "verification_time": None,
            "verified_by": None,
        }

    connection, _ = _connection()
    connection.fetch = AsyncMock(return_value=[_row("T2", newer), _row("T1", older)])
    repository = TicketStore(DummyPool(connection))

    records = await repository.list_ticket_history("u1")

    query = connection.fetch.await_args.args[0]
    assert "ORDER BY created_at DESC" in query
    assert connection.fetch.await_args.args[1:] == ("u1",)
    assert [record.ticket_id for record in records] == ["T2", "T1"]
