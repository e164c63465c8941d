"""HTTP supervisor backend.

Sends supervisor commands as HTTP requests to the supervisor endpoint.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from nodeconsole.domain.models import CommandResult, NodeSummary, TextResult
from nodeconsole.supervisor.base import Supervisor, SupervisorError

logger = logging.getLogger(__name__)

_NODE_LIST = TypeAdapter(list[NodeSummary])


class HttpSupervisor(Supervisor):
    """Talks to a supervisor endpoint served by ``nodeconsole endpoint``."""

    def __init__(
        self,
        base_url: str = "http://localhost:8090",
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client and verify endpoint connectivity."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
        )
        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            logger.info("Connected to supervisor at %s", self._base_url)
        except Exception as e:
            await self._client.aclose()
            self._client = None
            raise SupervisorError(
                f"Failed to connect to supervisor: {e}", backend="http"
            ) from e

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from supervisor")

    async def fetch_nodes(self) -> list[NodeSummary]:
        resp = await self._request("GET", "/nodes")
        try:
            return _NODE_LIST.validate_python(resp.json())
        except (ValidationError, ValueError) as e:
            raise SupervisorError(f"Malformed node list: {e}", backend="http") from e

    async def initialize_node(
        self,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool,
    ) -> CommandResult:
        payload = {
            "name": name,
            "server_port": server_port,
            "swarm_port": swarm_port,
            "auto_start": auto_start,
        }
        return await self._command("POST", "/nodes", payload)

    async def update_node_config(
        self,
        original_name: str,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool,
    ) -> CommandResult:
        payload = {
            "name": name,
            "server_port": server_port,
            "swarm_port": swarm_port,
            "auto_start": auto_start,
        }
        return await self._command("PUT", _node_path(original_name), payload)

    async def start_node(self, name: str) -> CommandResult:
        return await self._command("POST", _node_path(name, "start"))

    async def stop_node(self, name: str) -> CommandResult:
        return await self._command("POST", _node_path(name, "stop"))

    async def delete_node(self, name: str) -> CommandResult:
        return await self._command("DELETE", _node_path(name))

    async def send_input(self, name: str, text: str) -> CommandResult:
        result = await self._command("POST", _node_path(name, "input"), {"text": text})
        logger.debug("Sent input to %s: %s", name, text[:50])
        return result

    async def get_current_output(self, name: str) -> TextResult:
        return await self._text("GET", _node_path(name, "output"))

    async def get_log(self, name: str) -> TextResult:
        return await self._text("GET", _node_path(name, "log"))

    async def open_admin_dashboard(self, name: str) -> CommandResult:
        return await self._command("POST", _node_path(name, "dashboard"))

    async def _command(self, method: str, path: str, payload: dict | None = None) -> CommandResult:
        resp = await self._request(method, path, payload)
        try:
            return CommandResult.model_validate(resp.json())
        except (ValidationError, ValueError) as e:
            raise SupervisorError(f"Malformed response from {path}: {e}", backend="http") from e

    async def _text(self, method: str, path: str) -> TextResult:
        resp = await self._request(method, path)
        try:
            return TextResult.model_validate(resp.json())
        except (ValidationError, ValueError) as e:
            raise SupervisorError(f"Malformed response from {path}: {e}", backend="http") from e

    async def _request(self, method: str, path: str, payload: dict | None = None) -> httpx.Response:
        """Send a request to the endpoint."""
        if self._client is None:
            raise SupervisorError("Not connected to supervisor", backend="http")
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            raise SupervisorError(
                f"{method} {path} failed: {detail}", backend="http"
            ) from e
        except httpx.HTTPError as e:
            raise SupervisorError(
                f"HTTP request to {path} failed: {e}", backend="http"
            ) from e


def _node_path(name: str, action: str | None = None) -> str:
    path = f"/nodes/{quote(name, safe='')}"
    return f"{path}/{action}" if action else path


def _error_detail(resp: httpx.Response) -> str:
    try:
        return str(resp.json().get("detail", resp.text))
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
