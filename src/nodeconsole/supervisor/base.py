"""Abstract base class for the node process supervisor.

The supervisor is the authority that actually creates, starts, stops and
talks to node processes. The console only consumes this interface, so an
in-process supervisor and a remote one reached over HTTP are
interchangeable.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from nodeconsole.domain.models import CommandResult, NodeSummary, TextResult

logger = logging.getLogger(__name__)


class Supervisor(ABC):
    """Abstract request/response interface to the node supervisor.

    Every command either returns a structured result (``success`` plus a
    message, and text for the text-returning calls) or raises
    SupervisorError when the call itself could not complete.

    Example usage::

        async with HttpSupervisor(base_url="http://localhost:8090") as sup:
            nodes = await sup.fetch_nodes()
            result = await sup.start_node(nodes[0].name)
            print(result.message)
    """

    async def connect(self) -> None:
        """Prepare the supervisor for use. The default does nothing."""

    async def disconnect(self) -> None:
        """Release supervisor resources. Safe to call multiple times."""

    @abstractmethod
    async def fetch_nodes(self) -> list[NodeSummary]:
        """Return summaries of every node the supervisor knows about.

        Raises:
            SupervisorError: If the node list cannot be obtained.
        """
        ...

    @abstractmethod
    async def initialize_node(
        self,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool,
    ) -> CommandResult:
        """Create a new node home with the given ports."""
        ...

    @abstractmethod
    async def update_node_config(
        self,
        original_name: str,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool,
    ) -> CommandResult:
        """Change a node's ports, auto-start flag and, optionally, its name."""
        ...

    @abstractmethod
    async def start_node(self, name: str) -> CommandResult:
        """Launch the node process."""
        ...

    @abstractmethod
    async def stop_node(self, name: str) -> CommandResult:
        """Terminate the node process."""
        ...

    @abstractmethod
    async def delete_node(self, name: str) -> CommandResult:
        """Stop the node if needed and remove its home directory."""
        ...

    @abstractmethod
    async def send_input(self, name: str, text: str) -> CommandResult:
        """Write one input line to the node's stdin.

        Raises:
            SupervisorError: If the node is unknown or not accepting input.
        """
        ...

    @abstractmethod
    async def get_current_output(self, name: str) -> TextResult:
        """Return all output the running node has produced so far."""
        ...

    @abstractmethod
    async def get_log(self, name: str) -> TextResult:
        """Return the persisted log file of the node."""
        ...

    @abstractmethod
    async def open_admin_dashboard(self, name: str) -> CommandResult:
        """Open the running node's admin dashboard in a browser."""
        ...

    async def __aenter__(self) -> Supervisor:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class SupervisorError(Exception):
    """Raised when a supervisor call cannot complete (process or transport failure)."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend
