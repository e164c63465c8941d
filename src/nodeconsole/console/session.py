"""Session controller for the live output of the selected node.

Owns the single output subscription of the console, dispatches start,
stop and input commands to the supervisor, and funnels subscription
events and command results into the OutputLog in the order they are
observed.
"""

from __future__ import annotations

import asyncio
import logging

from nodeconsole.console.output_log import OutputLog
from nodeconsole.domain.models import (
    CommandResult,
    NodeSummary,
    Notice,
    SessionState,
    Subscription,
)
from nodeconsole.events.base import DEFAULT_CHANNEL_PREFIX, EventSource, EventSourceError, channel_for
from nodeconsole.supervisor.base import Supervisor, SupervisorError

logger = logging.getLogger(__name__)


class SessionController:
    """Subscription lifecycle and command dispatch for one node at a time.

    Switching works as teardown-then-subscribe under a FIFO lock, so a
    switch requested mid-transition waits for the in-flight one to
    settle. Every switch request bumps a generation counter; fragments
    tagged with an older generation (late events from the previous
    channel, results of commands issued before the switch) are dropped.
    Fragments for the current generation are held back until the
    session has been seeded with the node's existing output.

    Example usage::

        async with SessionController(supervisor, events) as session:
            await session.observe(node)
            await session.start(node.name)
            print(session.log.snapshot())
    """

    def __init__(
        self,
        supervisor: Supervisor,
        events: EventSource,
        log: OutputLog | None = None,
        channel_prefix: str = DEFAULT_CHANNEL_PREFIX,
    ) -> None:
        self._supervisor = supervisor
        self._events = events
        self._log = log if log is not None else OutputLog()
        self._channel_prefix = channel_prefix
        self._state = SessionState.IDLE
        self._target: str | None = None
        self._subscription: Subscription | None = None
        self._switch_lock = asyncio.Lock()
        self._generation = 0
        self._live_generation = 0
        self._pending: list[str] = []
        self._running: dict[str, bool] = {}

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def target(self) -> str | None:
        """Name of the node the current session belongs to."""
        return self._target

    @property
    def subscription(self) -> Subscription | None:
        return self._subscription

    @property
    def log(self) -> OutputLog:
        return self._log

    def is_running(self, name: str | None = None) -> bool:
        name = name if name is not None else self._target
        return name is not None and self._running.get(name, False)

    def update_running(self, name: str, is_running: bool) -> None:
        """Record a running flag reported by the backend."""
        self._running[name] = is_running

    # ------------------------------------------------------------------
    # Subscription lifecycle
    # ------------------------------------------------------------------

    async def observe(self, node: NodeSummary | None) -> None:
        """Switch the session to ``node`` (None ends the session).

        Always tears down the current subscription first, even when
        ``node`` is the node already being observed.
        """
        self._generation += 1
        generation = self._generation
        self._pending = []
        if node is not None:
            # Visible to commands issued while the switch is queued.
            self._running[node.name] = node.is_running

        async with self._switch_lock:
            if generation != self._generation:
                logger.debug("Switch to %s superseded before it started", node.name if node else None)
                return

            await self._teardown()
            self._log.reset()

            if node is None:
                self._target = None
                self._go_live(generation)
                return

            self._target = node.name
            await self._establish(node.name, generation)

    async def close(self) -> None:
        """End the session and release the subscription."""
        await self.observe(None)

    async def _establish(self, name: str, generation: int) -> None:
        channel = channel_for(name, self._channel_prefix)
        self._state = SessionState.SUBSCRIBING

        def on_event(payload: str) -> None:
            self._emit(generation, payload)

        try:
            self._subscription = await self._events.subscribe(channel, on_event)
        except EventSourceError as e:
            logger.error("Failed to subscribe to %s: %s", channel, e)
            self._state = SessionState.IDLE
            if generation != self._generation:
                return
            self._log.append(f"Failed to subscribe to node output: {e}\n")
            self._go_live(generation)
            return

        logger.info("Subscribed to %s", channel)
        if generation != self._generation:
            # The queued switch tears this subscription down.
            self._state = SessionState.LIVE
            return

        try:
            seed = await self._fetch_current_output(name)
        except BaseException:
            await self._teardown()
            raise

        if generation != self._generation:
            self._state = SessionState.LIVE
            return

        self._log.append(seed)
        self._state = SessionState.LIVE
        self._go_live(generation)

    async def _fetch_current_output(self, name: str) -> str:
        try:
            result = await self._supervisor.get_current_output(name)
        except SupervisorError as e:
            logger.warning("Failed to fetch current output of %s: %s", name, e)
            return f"Failed to fetch node output: {e}\n"
        if not result.success:
            logger.debug("No current output for %s: %s", name, result.message)
            return ""
        return result.text or ""

    async def _teardown(self) -> None:
        subscription = self._subscription
        if subscription is None:
            self._state = SessionState.IDLE
            return

        self._state = SessionState.UNSUBSCRIBING
        try:
            await self._events.unsubscribe(subscription)
            logger.info("Unsubscribed from %s", subscription.channel)
        except EventSourceError as e:
            logger.warning("Failed to unsubscribe from %s: %s", subscription.channel, e)
        finally:
            self._subscription = None
            self._state = SessionState.IDLE

    def _go_live(self, generation: int) -> None:
        """Start appending directly and flush fragments held during setup."""
        self._live_generation = generation
        pending, self._pending = self._pending, []
        for fragment in pending:
            self._log.append(fragment)

    def _emit(self, generation: int, fragment: str) -> None:
        if generation != self._generation:
            logger.debug("Dropped fragment from superseded session (%d chars)", len(fragment))
            return
        if generation == self._live_generation:
            self._log.append(fragment)
        else:
            self._pending.append(fragment)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start(self, name: str) -> CommandResult | Notice:
        """Start ``name`` unless it is already marked running."""
        generation = self._generation
        if self.is_running(name):
            self._emit(generation, "Node is already running.\n")
            return Notice(title="Node Status", message="Node is already running.")

        self._emit(generation, "Starting node...\n")
        try:
            result = await self._supervisor.start_node(name)
        except SupervisorError as e:
            logger.error("Error starting node %s: %s", name, e)
            self._emit(generation, f"Failed to start node: {e}\n")
            self._running[name] = False
            return CommandResult(success=False, message=str(e))

        self._emit(generation, f"{result.message}\n")
        self._running[name] = result.success
        return result

    async def stop(self, name: str) -> CommandResult | Notice:
        """Stop ``name`` if it is marked running."""
        generation = self._generation
        if not self.is_running(name):
            return Notice(title="Node Status", message="Node is not running.")

        self._emit(generation, "Stopping node...\n")
        try:
            result = await self._supervisor.stop_node(name)
        except SupervisorError as e:
            logger.error("Error stopping node %s: %s", name, e)
            result = CommandResult(success=False, message=str(e))

        if result.success:
            self._emit(generation, f"Node stopped: {result.message}\n")
            self._running[name] = False
        else:
            self._emit(generation, f"Failed to stop node: {result.message}\n")
        return result

    async def send_input(self, text: str) -> bool:
        """Forward one input line to the session's node.

        Blank input is ignored. Returns True when the supervisor accepted
        the line; failures are written to the log instead of raised.
        """
        if not text.strip():
            return False
        name = self._target
        if name is None:
            logger.warning("Input dropped: no node selected")
            return False

        generation = self._generation
        try:
            result = await self._supervisor.send_input(name, text)
        except SupervisorError as e:
            logger.error("Error sending input to %s: %s", name, e)
            self._emit(generation, f"Error sending input: {e}\n")
            return False
        if not result.success:
            self._emit(generation, f"Error sending input: {result.message}\n")
            return False
        return True

    async def __aenter__(self) -> SessionController:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()
