"""Tests for the NodeRegistry."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from nodeconsole.console.registry import NodeRegistry, RegistryRefreshError
from nodeconsole.domain.models import NodeSummary
from nodeconsole.supervisor.base import SupervisorError


class TestNodeRegistry:
    @pytest.mark.asyncio
    async def test_refresh_replaces_cache(self, mock_supervisor: AsyncMock) -> None:
        registry = NodeRegistry(mock_supervisor)
        nodes = await registry.refresh()
        assert [n.name for n in nodes] == ["alpha", "beta"]
        assert registry.nodes == nodes

    @pytest.mark.asyncio
    async def test_selection_follows_new_snapshot(
        self, mock_supervisor: AsyncMock, alpha: NodeSummary, beta: NodeSummary
    ) -> None:
        registry = NodeRegistry(mock_supervisor)
        await registry.refresh()
        registry.select_by_name("alpha")

        stopped_alpha = alpha.model_copy(update={"is_running": False})
        mock_supervisor.fetch_nodes.return_value = [stopped_alpha, beta]
        await registry.refresh()

        assert registry.selected is registry.nodes[0]
        assert registry.selected.is_running is False

    @pytest.mark.asyncio
    async def test_selection_cleared_when_node_disappears(
        self, mock_supervisor: AsyncMock, beta: NodeSummary
    ) -> None:
        registry = NodeRegistry(mock_supervisor)
        await registry.refresh()
        registry.select_by_name("alpha")

        mock_supervisor.fetch_nodes.return_value = [beta]
        await registry.refresh()
        assert registry.selected is None

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_cache(self, mock_supervisor: AsyncMock) -> None:
        registry = NodeRegistry(mock_supervisor)
        await registry.refresh()
        registry.select_by_name("beta")
        previous = registry.nodes

        mock_supervisor.fetch_nodes.side_effect = SupervisorError("connection refused")
        with pytest.raises(RegistryRefreshError, match="connection refused"):
            await registry.refresh()

        assert registry.nodes is previous
        assert registry.selected is not None
        assert registry.selected.name == "beta"

    @pytest.mark.asyncio
    async def test_select_unknown_deselects(self, mock_supervisor: AsyncMock) -> None:
        registry = NodeRegistry(mock_supervisor)
        await registry.refresh()
        registry.select_by_name("alpha")
        assert registry.select_by_name("gamma") is None
        assert registry.selected is None

    def test_get_before_refresh(self, mock_supervisor: AsyncMock) -> None:
        registry = NodeRegistry(mock_supervisor)
        assert registry.get("alpha") is None
        assert registry.nodes == ()
