from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

DEFAULT_EVENT_NAME = "Unnamed Event"


@dataclass(slots=True)
class BookerEvent:
    """An event owned by a booker account."""

    organizer_uid: str
    event_id: str
    event_name: str
    event_date: str | None
    event_venue: str | None
    created_at: datetime


@dataclass(slots=True)
class EventOverview:
    """An event together with its check-in progress."""

    event: BookerEvent
    attendee_count: int
    verified_count: int

    @property
    def pending_count(self) -> int:
        return self.attendee_count - self.verified_count
