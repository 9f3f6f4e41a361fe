from __future__ import annotations

from typing import Any

import asyncpg

from .models import AttendeeRecord, TicketHistoryRecord, VerificationStamp


class TicketStoreError(RuntimeError):
    """Base error for guarded ticket store writes."""


class TicketAlreadyVerifiedError(TicketStoreError):
    """Raised when the attendee row was verified by a concurrent writer."""


class TicketHistoryMissingError(TicketStoreError):
    """Raised when the attendee's ticket history row vanished before commit."""


class TicketStore:
    """Data access for the attendee and ticket history copies of a ticket."""

    _CREATE_EVENTS_SQL = """
    CREATE TABLE IF NOT EXISTS booker_events (
        organizer_uid TEXT NOT NULL,
        event_id TEXT NOT NULL,
        event_name TEXT NOT NULL DEFAULT '',
        event_date TEXT NULL,
        event_venue TEXT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (organizer_uid, event_id)
    )
    """

    _CREATE_ATTENDEES_SQL = """
    CREATE TABLE IF NOT EXISTS event_attendees (
        organizer_uid TEXT NOT NULL,
        event_id TEXT NOT NULL,
        ticket_id TEXT NOT NULL,
        attendee_uid TEXT NULL,
        full_name TEXT NULL,
        email TEXT NULL,
        ticket_type TEXT NULL,
        purchase_date TEXT NULL,
        purchase_time TEXT NULL,
        ticket_reference TEXT NULL,
        verified BOOLEAN NOT NULL DEFAULT FALSE,
        verification_date TEXT NULL,
        verification_time TEXT NULL,
        verified_by TEXT NULL,
        PRIMARY KEY (organizer_uid, event_id, ticket_id),
        FOREIGN KEY (organizer_uid, event_id)
            REFERENCES booker_events (organizer_uid, event_id) ON DELETE CASCADE
    )
    """

    _CREATE_HISTORY_SQL = """
    CREATE TABLE IF NOT EXISTS ticket_history (
        account_uid TEXT NOT NULL,
        ticket_id TEXT NOT NULL,
        event_id TEXT NOT NULL,
        event_name TEXT NULL,
        ticket_type TEXT NULL,
        ticket_reference TEXT NULL,
        purchase_date TEXT NULL,
        purchase_time TEXT NULL,
        verified BOOLEAN NOT NULL DEFAULT FALSE,
        verification_date TEXT NULL,
        verification_time TEXT NULL,
        verified_by TEXT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (account_uid, ticket_id)
    )
    """

    _SELECT_ATTENDEE_SQL = """
    SELECT organizer_uid, event_id, ticket_id, attendee_uid, full_name, email, ticket_type,
           purchase_date, purchase_time, ticket_reference,
           verified, verification_date, verification_time, verified_by
    FROM event_attendees
    WHERE organizer_uid = $1 AND event_id = $2 AND ticket_id = $3
    """

    _SELECT_HISTORY_SQL = """
    SELECT account_uid, ticket_id, event_id, event_name, ticket_type, ticket_reference,
           purchase_date, purchase_time, created_at,
           verified, verification_date, verification_time, verified_by
    FROM ticket_history
    WHERE account_uid = $1 AND ticket_id = $2
    """

    _LIST_HISTORY_SQL = """
    SELECT account_uid, ticket_id, event_id, event_name, ticket_type, ticket_reference,
           purchase_date, purchase_time, created_at,
           verified, verification_date, verification_time, verified_by
    FROM ticket_history
    WHERE account_uid = $1
    ORDER BY created_at DESC
    """

    _SELECT_EVENT_NAME_SQL = """
    SELECT event_name FROM booker_events WHERE organizer_uid = $1 AND event_id = $2
    """

    # Only an unverified row may be stamped; the row lock taken here serializes
    # concurrent scans of the same ticket.
    _VERIFY_ATTENDEE_SQL = """
    UPDATE event_attendees
    SET verified = TRUE,
        verification_date = $4,
        verification_time = $5,
        verified_by = $6
    WHERE organizer_uid = $1 AND event_id = $2 AND ticket_id = $3 AND verified = FALSE
    """

    _VERIFY_HISTORY_SQL = """
    UPDATE ticket_history
    SET verified = TRUE,
        verification_date = $3,
        verification_time = $4,
        verified_by = $5
    WHERE account_uid = $1 AND ticket_id = $2
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def ensure_schema(self) -> None:
        async with self._pool.acquire() as connection:
            await connection.execute(self._CREATE_EVENTS_SQL)
            await connection.execute(self._CREATE_ATTENDEES_SQL)
            await connection.execute(self._CREATE_HISTORY_SQL)

    async def get_attendee(self, organizer_uid: str, event_id: str, ticket_id: str) -> AttendeeRecord | None:
        async with self._pool.acquire() as connection:
            row = await connection.fetchrow(self._SELECT_ATTENDEE_SQL, organizer_uid, event_id, ticket_id)
        if row is None:
            return None
        return attendee_from_row(row)

    async def get_ticket_history(self, account_uid: str, ticket_id: str) -> TicketHistoryRecord | None:
        async with self._pool.acquire() as connection:
            row = await connection.fetchrow(self._SELECT_HISTORY_SQL, account_uid, ticket_id)
        if row is None:
            return None
        return history_from_row(row)

    async def list_ticket_history(self, account_uid: str) -> list[TicketHistoryRecord]:
        async with self._pool.acquire() as connection:
            rows = await connection.fetch(self._LIST_HISTORY_SQL, account_uid)
        return [history_from_row(row) for row in rows]

    async def get_event_name(self, organizer_uid: str, event_id: str) -> str | None:
        async with self._pool.acquire() as connection:
            name = await connection.fetchval(self._SELECT_EVENT_NAME_SQL, organizer_uid, event_id)
        return str(name) if name else None

    async def mark_verified(
        self,
        *,
        organizer_uid: str,
        event_id: str,
        ticket_id: str,
        attendee_uid: str,
        stamp: VerificationStamp,
    ) -> None:
        """Stamp both copies of a ticket in one transaction.

        Raises :class:`TicketAlreadyVerifiedError` when the attendee row is no
        longer unverified and :class:`TicketHistoryMissingError` when the
        history row is gone. Either error rolls the transaction back, so the
        two copies never disagree.
        """

        async with self._pool.acquire() as connection:
            async with connection.transaction():
                status = await connection.execute(
                    self._VERIFY_ATTENDEE_SQL,
                    organizer_uid,
                    event_id,
                    ticket_id,
                    stamp.verification_date,
                    stamp.verification_time,
                    stamp.verified_by,
                )
                if _rows_affected(status) == 0:
                    raise TicketAlreadyVerifiedError(f"Ticket {ticket_id} is already verified")

                status = await connection.execute(
                    self._VERIFY_HISTORY_SQL,
                    attendee_uid,
                    ticket_id,
                    stamp.verification_date,
                    stamp.verification_time,
                    stamp.verified_by,
                )
                if _rows_affected(status) == 0:
                    raise TicketHistoryMissingError(
                        f"Ticket {ticket_id} has no history record for account {attendee_uid}"
                    )


def _rows_affected(status: Any) -> int:
    # asyncpg returns the command tag, e.g. "UPDATE 1"
    if isinstance(status, str):
        tail = status.strip().rsplit(" ", 1)[-1]
        return int(tail) if tail.isdigit() else 0
    return int(bool(status))


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def stamp_from_row(row: Any) -> VerificationStamp:
    return VerificationStamp(
        verified=bool(row["verified"]),
        verification_date=_optional_str(row["verification_date"]),
        verification_time=_optional_str(row["verification_time"]),
        verified_by=_optional_str(row["verified_by"]),
    )


def attendee_from_row(row: Any) -> AttendeeRecord:
    return AttendeeRecord(
        organizer_uid=str(row["organizer_uid"]),
        event_id=str(row["event_id"]),
        ticket_id=str(row["ticket_id"]),
        attendee_uid=_optional_str(row["attendee_uid"]),
        full_name=_optional_str(row["full_name"]),
        email=_optional_str(row["email"]),
        ticket_type=_optional_str(row["ticket_type"]),
        purchase_date=_optional_str(row["purchase_date"]),
        purchase_time=_optional_str(row["purchase_time"]),
        ticket_reference=_optional_str(row["ticket_reference"]),
        stamp=stamp_from_row(row),
    )


def history_from_row(row: Any) -> TicketHistoryRecord:
    return TicketHistoryRecord(
        account_uid=str(row["account_uid"]),
        ticket_id=str(row["ticket_id"]),
        event_id=str(row["event_id"]),
        event_name=_optional_str(row["event_name"]),
        ticket_type=_optional_str(row["ticket_type"]),
        ticket_reference=_optional_str(row["ticket_reference"]),
        purchase_date=_optional_str(row["purchase_date"]),
        purchase_time=_optional_str(row["purchase_time"]),
        created_at=row["created_at"],
        stamp=stamp_from_row(row),
    )
