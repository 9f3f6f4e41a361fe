"""Booker event listings and attendee overviews."""

from .models import BookerEvent, EventOverview
from .repository import EventRepository
from .service import EventNotFoundError, EventService

__all__ = [
    "BookerEvent",
    "EventNotFoundError",
    "EventOverview",
    "EventRepository",
    "EventService",
]
