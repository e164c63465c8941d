"""Shared test fixtures for the nodeconsole test suite.

Provides common fixtures used across unit tests: sample node summaries,
a mock supervisor, an in-process event bus and a small command grammar.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from nodeconsole.console.grammar import CommandGrammar
from nodeconsole.domain.models import CommandResult, NodePorts, NodeSummary, TextResult
from nodeconsole.events.local import LocalEventBus
from nodeconsole.supervisor.base import Supervisor


# ---------------------------------------------------------------------------
# Node Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def alpha() -> NodeSummary:
    """A running node called alpha."""
    return NodeSummary(
        name="alpha",
        is_running=True,
        auto_start=False,
        ports=NodePorts(server_port=2428, swarm_port=2528),
    )


@pytest.fixture
def beta() -> NodeSummary:
    """A stopped node called beta."""
    return NodeSummary(
        name="beta",
        is_running=False,
        auto_start=True,
        ports=NodePorts(server_port=2429, swarm_port=2529),
    )


# ---------------------------------------------------------------------------
# Grammar Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def small_grammar() -> CommandGrammar:
    """A two-command grammar with one placeholder command."""
    return CommandGrammar({
        "call": ["<ctx> <method> <payload> <key>"],
        "context": ["ls", "join", "leave"],
    })


# ---------------------------------------------------------------------------
# Backend Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def event_bus() -> LocalEventBus:
    """An empty in-process event bus."""
    return LocalEventBus()


@pytest.fixture
def mock_supervisor(alpha: NodeSummary, beta: NodeSummary) -> AsyncMock:
    """A mock Supervisor that knows alpha and beta and accepts every command."""
    supervisor = AsyncMock(spec=Supervisor)
    supervisor.fetch_nodes.return_value = [alpha, beta]
    supervisor.get_current_output.return_value = TextResult(success=True, text="")
    supervisor.start_node.return_value = CommandResult(
        success=True, message="Node start command issued. Check the output for status."
    )
    supervisor.stop_node.return_value = CommandResult(success=True, message="stopped")
    supervisor.send_input.return_value = CommandResult(success=True, message="Input sent successfully")
    supervisor.initialize_node.return_value = CommandResult(
        success=True, message="Node initialized successfully"
    )
    supervisor.update_node_config.return_value = CommandResult(success=True, message="updated")
    supervisor.delete_node.return_value = CommandResult(success=True, message="deleted")
    supervisor.get_log.return_value = TextResult(success=True, text="line 1\nline 2\n")
    supervisor.open_admin_dashboard.return_value = CommandResult(success=True, message="opened")
    return supervisor
