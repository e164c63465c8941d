"""Abstract base class for node output event sources.

An event source pushes opaque text fragments published on a named
channel. The console subscribes to exactly one node's channel at a time
and releases the subscription before taking a new one.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from nodeconsole.domain.models import Subscription

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_PREFIX = "node-output-"

EventHandler = Callable[[str], None]


def channel_for(node_name: str, prefix: str = DEFAULT_CHANNEL_PREFIX) -> str:
    """Channel key on which a node's output is published."""
    return f"{prefix}{node_name}"


class EventSource(ABC):
    """Abstract subscribe/unsubscribe primitive keyed by channel.

    Handlers are invoked on the event loop thread with each payload, in
    the order the source received them.
    """

    @abstractmethod
    async def subscribe(self, channel: str, handler: EventHandler) -> Subscription:
        """Start delivering payloads published on ``channel`` to ``handler``.

        Raises:
            EventSourceError: If the subscription cannot be established.
        """
        ...

    @abstractmethod
    async def unsubscribe(self, subscription: Subscription) -> None:
        """Stop delivery for ``subscription``. Unknown handles are ignored."""
        ...

    async def close(self) -> None:
        """Release every resource held by the source."""


class EventSourceError(Exception):
    """Raised when subscribing to or reading from an event source fails."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend
