"""Cached registry of node summaries and the current selection."""

from __future__ import annotations

import logging

from nodeconsole.domain.models import NodeSummary
from nodeconsole.supervisor.base import Supervisor, SupervisorError

logger = logging.getLogger(__name__)


class NodeRegistry:
    """Holds the last node list fetched from the supervisor.

    The cached list is only ever replaced as a whole. The selection is
    kept by name and re-resolved against every new snapshot, so it is
    either None or an object of the current snapshot.
    """

    def __init__(self, supervisor: Supervisor) -> None:
        self._supervisor = supervisor
        self._nodes: tuple[NodeSummary, ...] = ()
        self._selected: NodeSummary | None = None

    @property
    def nodes(self) -> tuple[NodeSummary, ...]:
        return self._nodes

    @property
    def selected(self) -> NodeSummary | None:
        return self._selected

    def get(self, name: str) -> NodeSummary | None:
        for node in self._nodes:
            if node.name == name:
                return node
        return None

    async def refresh(self) -> tuple[NodeSummary, ...]:
        """Fetch the node list and replace the cache.

        Raises:
            RegistryRefreshError: If the supervisor call fails. The cache
                and selection are left untouched.
        """
        try:
            fetched = await self._supervisor.fetch_nodes()
        except SupervisorError as e:
            logger.error("Failed to refresh node list: %s", e)
            raise RegistryRefreshError(f"Failed to fetch nodes: {e}") from e

        self._nodes = tuple(fetched)
        if self._selected is not None:
            previous = self._selected.name
            self._selected = self.get(previous)
            if self._selected is None:
                logger.info("Selected node %s no longer exists", previous)
        logger.debug("Registry refreshed: %d nodes", len(self._nodes))
        return self._nodes

    def select_by_name(self, name: str | None) -> NodeSummary | None:
        """Select the node called ``name`` (None or unknown deselects)."""
        self._selected = self.get(name) if name else None
        return self._selected


class RegistryRefreshError(Exception):
    """Raised when the node list cannot be fetched."""
