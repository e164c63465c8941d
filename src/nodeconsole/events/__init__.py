"""Node output event module for nodeconsole.

Public API:
    EventSource -- Abstract subscribe/unsubscribe interface
    LocalEventBus -- In-process publish/subscribe bus
    HttpEventSource -- Streaming client for the supervisor endpoint
"""

from nodeconsole.events.base import (
    DEFAULT_CHANNEL_PREFIX,
    EventHandler,
    EventSource,
    EventSourceError,
    channel_for,
)
from nodeconsole.events.local import LocalEventBus

__all__ = [
    "DEFAULT_CHANNEL_PREFIX",
    "EventHandler",
    "EventSource",
    "EventSourceError",
    "HttpEventSource",
    "LocalEventBus",
    "channel_for",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "HttpEventSource":
        from nodeconsole.events.http_stream import HttpEventSource
        return HttpEventSource
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
