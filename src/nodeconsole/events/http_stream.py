"""HTTP streaming event source.

Reads node output pushed by the supervisor endpoint's ``/events/{channel}``
route. The route streams one JSON object per line; the first line confirms
the subscription, every following line carries a ``payload``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from urllib.parse import quote

import httpx

from nodeconsole.domain.models import Subscription
from nodeconsole.events.base import EventHandler, EventSource, EventSourceError

logger = logging.getLogger(__name__)


class HttpEventSource(EventSource):
    """Subscribes to channels on a remote supervisor endpoint."""

    def __init__(
        self,
        base_url: str = "http://localhost:8090",
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._streams: dict[str, asyncio.Task[None]] = {}

    async def subscribe(self, channel: str, handler: EventHandler) -> Subscription:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                # Reads block until the node prints something.
                timeout=httpx.Timeout(self._timeout, read=None),
            )
        confirmed: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        task = asyncio.create_task(self._read_stream(self._client, channel, handler, confirmed))
        try:
            await confirmed
        except Exception as e:
            task.cancel()
            raise EventSourceError(
                f"Failed to subscribe to {channel}: {e}", backend="http"
            ) from e

        subscription = Subscription(subscription_id=uuid.uuid4().hex, channel=channel)
        self._streams[subscription.subscription_id] = task
        logger.debug("Streaming %s from %s", channel, self._base_url)
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        task = self._streams.pop(subscription.subscription_id, None)
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Stopped streaming %s", subscription.channel)

    async def close(self) -> None:
        for subscription_id in list(self._streams):
            task = self._streams.pop(subscription_id)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _read_stream(
        self,
        client: httpx.AsyncClient,
        channel: str,
        handler: EventHandler,
        confirmed: asyncio.Future[None],
    ) -> None:
        try:
            async with client.stream("GET", f"/events/{quote(channel, safe='')}") as resp:
                resp.raise_for_status()
                async for line in resp.aiter_lines():
                    if not line:
                        continue
                    message = json.loads(line)
                    if "payload" in message:
                        handler(message["payload"])
                    elif not confirmed.done():
                        confirmed.set_result(None)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not confirmed.done():
                confirmed.set_exception(e)
            else:
                logger.error("Event stream %s failed: %s", channel, e)
        else:
            if not confirmed.done():
                confirmed.set_exception(EventSourceError("Stream closed before confirmation"))
            logger.info("Event stream %s closed by server", channel)
