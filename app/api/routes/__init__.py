"""Route modules exposed by the API package."""

from . import events, history, metrics, ping, verification

__all__ = ["events", "history", "metrics", "ping", "verification"]
