"""In-process publish/subscribe bus for node output."""

from __future__ import annotations

import logging
import uuid

from nodeconsole.domain.models import Subscription
from nodeconsole.events.base import EventHandler, EventSource

logger = logging.getLogger(__name__)


class LocalEventBus(EventSource):
    """Delivers published payloads synchronously to in-process handlers."""

    def __init__(self) -> None:
        self._channels: dict[str, dict[str, EventHandler]] = {}

    def subscriber_count(self, channel: str) -> int:
        return len(self._channels.get(channel, {}))

    async def subscribe(self, channel: str, handler: EventHandler) -> Subscription:
        subscription = Subscription(subscription_id=uuid.uuid4().hex, channel=channel)
        self._channels.setdefault(channel, {})[subscription.subscription_id] = handler
        logger.debug("Subscribed %s to %s", subscription.subscription_id, channel)
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        handlers = self._channels.get(subscription.channel)
        if not handlers or handlers.pop(subscription.subscription_id, None) is None:
            return
        if not handlers:
            del self._channels[subscription.channel]
        logger.debug("Unsubscribed %s from %s", subscription.subscription_id, subscription.channel)

    def publish(self, channel: str, payload: str) -> int:
        """Deliver ``payload`` to every handler on ``channel``.

        Returns the number of handlers reached. A failing handler is
        logged and does not stop delivery to the others.
        """
        handlers = list(self._channels.get(channel, {}).values())
        for handler in handlers:
            try:
                handler(payload)
            except Exception as e:
                logger.error("Event handler on %s failed: %s", channel, e)
        return len(handlers)

    async def close(self) -> None:
        self._channels.clear()
