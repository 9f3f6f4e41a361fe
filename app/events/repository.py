from __future__ import annotations

from typing import Any

import asyncpg

from app.verification.models import AttendeeRecord
from app.verification.repository import attendee_from_row

from .models import DEFAULT_EVENT_NAME, BookerEvent


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class EventRepository:
    """Read access to a booker's events and their attendee lists."""

    _LIST_EVENTS_SQL = """
    SELECT organizer_uid, event_id, event_name, event_date, event_venue, created_at
    FROM booker_events
    WHERE organizer_uid = $1
    ORDER BY created_at DESC
    """

    _SELECT_EVENT_SQL = """
    SELECT organizer_uid, event_id, event_name, event_date, event_venue, created_at
    FROM booker_events
    WHERE organizer_uid = $1 AND event_id = $2
    """

    _COUNT_ATTENDEES_SQL = """
    SELECT COUNT(*) AS attendee_count,
           COUNT(*) FILTER (WHERE verified) AS verified_count
    FROM event_attendees
    WHERE organizer_uid = $1 AND event_id = $2
    """

    _LIST_ATTENDEES_SQL = """
    SELECT organizer_uid, event_id, ticket_id, attendee_uid, full_name, email, ticket_type,
           purchase_date, purchase_time, ticket_reference,
           verified, verification_date, verification_time, verified_by
    FROM event_attendees
    WHERE {conditions}
    ORDER BY full_name ASC NULLS LAST, ticket_id ASC
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def list_events(self, organizer_uid: str) -> list[BookerEvent]:
        async with self._pool.acquire() as connection:
            rows = await connection.fetch(self._LIST_EVENTS_SQL, organizer_uid)
        return [self._row_to_event(row) for row in rows]

    async def get_event(self, organizer_uid: str, event_id: str) -> BookerEvent | None:
        async with self._pool.acquire() as connection:
            row = await connection.fetchrow(self._SELECT_EVENT_SQL, organizer_uid, event_id)
        if row is None:
            return None
        return self._row_to_event(row)

    async def count_attendees(self, organizer_uid: str, event_id: str) -> tuple[int, int]:
        """Return ``(attendee_count, verified_count)`` for an event."""

        async with self._pool.acquire() as connection:
            row = await connection.fetchrow(self._COUNT_ATTENDEES_SQL, organizer_uid, event_id)
        if row is None:
            return 0, 0
        return int(row["attendee_count"] or 0), int(row["verified_count"] or 0)

    async def list_attendees(
        self,
        organizer_uid: str,
        event_id: str,
        *,
        verified: bool | None = None,
        search: str | None = None,
    ) -> list[AttendeeRecord]:
        conditions = ["organizer_uid = $1", "event_id = $2"]
        params: list[Any] = [organizer_uid, event_id]
        if verified is not None:
            params.append(verified)
            conditions.append(f"verified = ${len(params)}")
        if search:
            params.append(f"%{_escape_like(search)}%")
            conditions.append(f"full_name ILIKE ${len(params)}")

        query = self._LIST_ATTENDEES_SQL.format(conditions=" AND ".join(conditions))
        async with self._pool.acquire() as connection:
            rows = await connection.fetch(query, *params)
        return [attendee_from_row(row) for row in rows]

    @staticmethod
    def _row_to_event(row: Any) -> BookerEvent:
        name = row["event_name"]
        return BookerEvent(
            organizer_uid=str(row["organizer_uid"]),
            event_id=str(row["event_id"]),
            event_name=str(name) if name else DEFAULT_EVENT_NAME,
            event_date=None if row["event_date"] is None else str(row["event_date"]),
            event_venue=None if row["event_venue"] is None else str(row["event_venue"]),
            created_at=row["created_at"],
        )
