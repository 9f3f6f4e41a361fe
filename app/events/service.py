from __future__ import annotations

from dataclasses import dataclass

from app.verification.models import AttendeeRecord

from .models import BookerEvent, EventOverview
from .repository import EventRepository


class EventServiceError(RuntimeError):
    """Base error for booker event queries."""


class EventNotFoundError(EventServiceError):
    """Raised when an event does not belong to the requesting booker."""


@dataclass(slots=True)
class EventService:
    """Booker facing reads over events and attendees."""

    repository: EventRepository

    async def list_events(self, organizer_uid: str) -> list[BookerEvent]:
        return await self.repository.list_events(organizer_uid)

    async def get_event(self, organizer_uid: str, event_id: str) -> BookerEvent:
        event = await self.repository.get_event(organizer_uid, event_id)
        if event is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        return event

    async def get_event_overview(self, organizer_uid: str, event_id: str) -> EventOverview:
        event = await self.get_event(organizer_uid, event_id)
        attendee_count, verified_count = await self.repository.count_attendees(organizer_uid, event_id)
        return EventOverview(event=event, attendee_count=attendee_count, verified_count=verified_count)

    async def list_attendees(
        self,
        organizer_uid: str,
        event_id: str,
        *,
        verified: bool | None = None,
        search: str | None = None,
    ) -> list[AttendeeRecord]:
        await self.get_event(organizer_uid, event_id)
        term = (search or "").strip() or None
        return await self.repository.list_attendees(organizer_uid, event_id, verified=verified, search=term)
