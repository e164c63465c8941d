"""Console facade composing registry, session and autocomplete.

This is the object a front end drives: it owns the identity of the
selected node and turns selection changes into session switches.
"""

from __future__ import annotations

import logging

from nodeconsole.config.settings import DEFAULT_GRAMMAR, Settings
from nodeconsole.console.autocomplete import AutocompleteEngine
from nodeconsole.console.grammar import CommandGrammar
from nodeconsole.console.registry import NodeRegistry, RegistryRefreshError
from nodeconsole.console.session import SessionController
from nodeconsole.domain.models import (
    CommandResult,
    NodeSummary,
    Notice,
    NoticeLevel,
    TextResult,
)
from nodeconsole.events.base import DEFAULT_CHANNEL_PREFIX, EventSource
from nodeconsole.supervisor.base import Supervisor, SupervisorError

logger = logging.getLogger(__name__)

NO_SELECTION = Notice(title="Node Status", message="No node selected.")


class Console:
    """Operator console for one selected node at a time.

    Example usage::

        console = Console(supervisor, events)
        await console.refresh()
        await console.select("alpha")
        await console.start()
        console.type("context j")   # -> ("join",)
        console.autocomplete.accept(0)
        await console.submit()
    """

    def __init__(
        self,
        supervisor: Supervisor,
        events: EventSource,
        grammar: CommandGrammar | None = None,
        marker: str = "/",
        channel_prefix: str = DEFAULT_CHANNEL_PREFIX,
    ) -> None:
        self._supervisor = supervisor
        self._events = events
        self._selected_name: str | None = None
        self.registry = NodeRegistry(supervisor)
        self.session = SessionController(supervisor, events, channel_prefix=channel_prefix)
        self.autocomplete = AutocompleteEngine(
            grammar if grammar is not None else CommandGrammar(DEFAULT_GRAMMAR),
            marker=marker,
        )

    @classmethod
    def from_settings(cls, settings: Settings, supervisor: Supervisor, events: EventSource) -> Console:
        return cls(
            supervisor,
            events,
            grammar=CommandGrammar(settings.console.grammar),
            marker=settings.console.directive_marker,
            channel_prefix=settings.console.channel_prefix,
        )

    @property
    def selected(self) -> NodeSummary | None:
        if self._selected_name is None:
            return None
        return self.registry.get(self._selected_name)

    @property
    def nodes(self) -> tuple[NodeSummary, ...]:
        return self.registry.nodes

    @property
    def output(self) -> str:
        return self.session.log.snapshot()

    # ------------------------------------------------------------------
    # Registry and selection
    # ------------------------------------------------------------------

    async def refresh(self) -> Notice | None:
        """Reload the node list; returns an error notice on failure."""
        try:
            await self.registry.refresh()
        except RegistryRefreshError as e:
            return Notice(level=NoticeLevel.ERROR, title="Refresh failed", message=str(e))

        selected = self.registry.selected
        if self._selected_name is not None and selected is None:
            logger.info("Deselecting removed node %s", self._selected_name)
            await self._set_selection(None)
        elif selected is not None:
            self.session.update_running(selected.name, selected.is_running)
        return None

    async def select(self, name: str | None) -> NodeSummary | None:
        """Select ``name`` and start observing it, even if already selected."""
        node = self.registry.select_by_name(name)
        if name and node is None:
            logger.warning("Unknown node: %s", name)
        await self._set_selection(node)
        return node

    async def _set_selection(self, node: NodeSummary | None) -> None:
        self.registry.select_by_name(node.name if node else None)
        self._selected_name = node.name if node else None
        await self.session.observe(node)

    # ------------------------------------------------------------------
    # Session commands
    # ------------------------------------------------------------------

    async def start(self) -> CommandResult | Notice:
        if self._selected_name is None:
            return NO_SELECTION
        return await self.session.start(self._selected_name)

    async def stop(self) -> CommandResult | Notice:
        if self._selected_name is None:
            return NO_SELECTION
        return await self.session.stop(self._selected_name)

    def type(self, text: str) -> tuple[str, ...]:
        """Update the input buffer; returns the suggestion labels."""
        return self.autocomplete.set_text(text)

    async def submit(self, text: str | None = None) -> bool:
        """Send ``text`` (default: the input buffer) to the selected node.

        The input buffer is cleared once the supervisor accepts the line.
        """
        line = self.autocomplete.text if text is None else text
        sent = await self.session.send_input(line)
        if sent:
            self.autocomplete.clear()
        return sent

    # ------------------------------------------------------------------
    # Node management
    # ------------------------------------------------------------------

    async def initialize_node(
        self,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool = False,
    ) -> CommandResult:
        try:
            result = await self._supervisor.initialize_node(name, server_port, swarm_port, auto_start)
        except SupervisorError as e:
            logger.error("Failed to initialize node %s: %s", name, e)
            return CommandResult(success=False, message=str(e))
        if result.success:
            await self.refresh()
        return result

    async def update_node_config(
        self,
        original_name: str,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool,
    ) -> CommandResult:
        try:
            result = await self._supervisor.update_node_config(
                original_name, name, server_port, swarm_port, auto_start
            )
        except SupervisorError as e:
            logger.error("Failed to update node %s: %s", original_name, e)
            return CommandResult(success=False, message=str(e))

        renamed_selection = result.success and self._selected_name == original_name != name
        await self.refresh()
        if renamed_selection:
            await self.select(name)
        return result

    async def delete_node(self, name: str | None = None) -> CommandResult | Notice:
        name = name or self._selected_name
        if name is None:
            return NO_SELECTION
        try:
            result = await self._supervisor.delete_node(name)
        except SupervisorError as e:
            logger.error("Failed to delete node %s: %s", name, e)
            return CommandResult(success=False, message=str(e))
        if result.success and name == self._selected_name:
            await self._set_selection(None)
        await self.refresh()
        return result

    async def node_log(self, name: str | None = None) -> TextResult | Notice:
        name = name or self._selected_name
        if name is None:
            return NO_SELECTION
        try:
            return await self._supervisor.get_log(name)
        except SupervisorError as e:
            logger.error("Failed to fetch log of %s: %s", name, e)
            return TextResult(success=False, message="Failed to fetch logs. Please try again.")

    async def open_admin_dashboard(self) -> CommandResult | Notice:
        if self._selected_name is None:
            return NO_SELECTION
        if not self.session.is_running(self._selected_name):
            return Notice(level=NoticeLevel.ERROR, title="Error", message="Node is not running")
        try:
            return await self._supervisor.open_admin_dashboard(self._selected_name)
        except SupervisorError as e:
            return CommandResult(success=False, message=str(e))

    async def close(self) -> None:
        await self.session.close()

    async def __aenter__(self) -> Console:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()
