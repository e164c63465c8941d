"""In-process node supervisor.

Manages node processes as asyncio subprocesses. Each node lives in its
own directory under ``nodes_dir`` holding a ``node.yaml`` record (ports,
auto-start flag) and a ``node.log`` file. Output lines are cleaned of
ANSI colour codes, accumulated as the node's current output, appended
to the log and published on the node's output channel.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import socket
import webbrowser
from datetime import datetime
from pathlib import Path

import yaml

from nodeconsole.domain.models import CommandResult, NodePorts, NodeSummary, TextResult
from nodeconsole.events.base import DEFAULT_CHANNEL_PREFIX, channel_for
from nodeconsole.events.local import LocalEventBus
from nodeconsole.supervisor.base import Supervisor, SupervisorError
from nodeconsole.utils.text import strip_ansi_escapes, trim_to_tail

logger = logging.getLogger(__name__)

RECORD_FILE = "node.yaml"
LOG_FILE = "node.log"


class NodeProcess:
    """A spawned node with its accumulated output."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        self.process = process
        self.output: list[str] = []
        self.readers: list[asyncio.Task[None]] = []

    @property
    def is_alive(self) -> bool:
        return self.process.returncode is None


class LocalSupervisor(Supervisor):
    """Runs nodes as child processes of the current interpreter."""

    def __init__(
        self,
        nodes_dir: Path | str,
        node_binary: str = "meroctl",
        events: LocalEventBus | None = None,
        max_log_bytes: int = 5 * 1024 * 1024,
        dashboard_url_template: str = "http://localhost:{server_port}/admin-dashboard",
        channel_prefix: str = DEFAULT_CHANNEL_PREFIX,
        stop_timeout: float = 5.0,
    ) -> None:
        self._nodes_dir = Path(nodes_dir).expanduser()
        self._binary = node_binary
        self._events = events if events is not None else LocalEventBus()
        self._max_log_bytes = max_log_bytes
        self._dashboard_url_template = dashboard_url_template
        self._channel_prefix = channel_prefix
        self._stop_timeout = stop_timeout
        self._processes: dict[str, NodeProcess] = {}

    @property
    def events(self) -> LocalEventBus:
        return self._events

    @property
    def nodes_dir(self) -> Path:
        return self._nodes_dir

    def is_running(self, name: str) -> bool:
        node = self._processes.get(name)
        return node is not None and node.is_alive

    async def connect(self) -> None:
        self._nodes_dir.mkdir(parents=True, exist_ok=True)

    async def disconnect(self) -> None:
        """Stop every node this supervisor started."""
        for name in list(self._processes):
            if self.is_running(name):
                await self.stop_node(name)
        self._processes.clear()

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    async def fetch_nodes(self) -> list[NodeSummary]:
        if not self._nodes_dir.exists():
            return []
        try:
            entries = sorted(p for p in self._nodes_dir.iterdir() if p.is_dir())
        except OSError as e:
            raise SupervisorError(f"Failed to read nodes directory: {e}", backend="local") from e

        nodes = []
        for entry in entries:
            record = self._read_record(entry.name)
            if record is None:
                continue
            nodes.append(
                NodeSummary(
                    name=entry.name,
                    is_running=self.is_running(entry.name),
                    auto_start=record.get("auto_start", False),
                    ports=NodePorts(
                        server_port=record["server_port"],
                        swarm_port=record["swarm_port"],
                    ),
                )
            )
        return nodes

    async def initialize_node(
        self,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool,
    ) -> CommandResult:
        problem = _validate(name, server_port, swarm_port)
        if problem:
            return CommandResult(success=False, message=problem)
        if self._read_record(name) is not None:
            return CommandResult(success=False, message=f"Node '{name}' already exists.")

        self._nodes_dir.mkdir(parents=True, exist_ok=True)
        returncode, stdout, stderr = await self._run_binary(
            name, "init", "--server-port", str(server_port), "--swarm-port", str(swarm_port)
        )
        if returncode != 0:
            return CommandResult(success=False, message=strip_ansi_escapes(stderr).strip())

        self._write_record(name, server_port, swarm_port, auto_start)
        for text in (stdout, stderr):
            if text:
                self._write_log(name, strip_ansi_escapes(text).rstrip("\n"))
        logger.info("Initialized node %s (server=%d, swarm=%d)", name, server_port, swarm_port)
        return CommandResult(success=True, message="Node initialized successfully")

    async def update_node_config(
        self,
        original_name: str,
        name: str,
        server_port: int,
        swarm_port: int,
        auto_start: bool,
    ) -> CommandResult:
        if self._read_record(original_name) is None:
            return CommandResult(success=False, message=f"Node '{original_name}' does not exist.")
        problem = _validate(name, server_port, swarm_port)
        if problem:
            return CommandResult(success=False, message=problem)

        if original_name != name:
            if self.is_running(original_name):
                return CommandResult(
                    success=False, message="Stop the node before renaming it."
                )
            target = self._nodes_dir / name
            if target.exists():
                return CommandResult(success=False, message=f"Node '{name}' already exists.")
            try:
                (self._nodes_dir / original_name).rename(target)
            except OSError as e:
                raise SupervisorError(f"Failed to rename node: {e}", backend="local") from e
            self._processes.pop(original_name, None)

        self._write_record(name, server_port, swarm_port, auto_start)
        return CommandResult(
            success=True,
            message=f"Configuration for node '{name}' has been updated successfully.",
        )

    async def delete_node(self, name: str) -> CommandResult:
        node_dir = self._nodes_dir / name
        if self._read_record(name) is None:
            return CommandResult(success=False, message=f"Node '{name}' does not exist.")
        if self.is_running(name):
            await self.stop_node(name)
        self._processes.pop(name, None)
        try:
            shutil.rmtree(node_dir)
        except OSError as e:
            raise SupervisorError(f"Failed to delete node: {e}", backend="local") from e
        logger.info("Deleted node %s", name)
        return CommandResult(success=True, message=f"Node '{name}' has been deleted successfully.")

    # ------------------------------------------------------------------
    # Process control
    # ------------------------------------------------------------------

    async def start_node(self, name: str) -> CommandResult:
        if self.is_running(name):
            return CommandResult(success=False, message="Node is already running")
        record = self._read_record(name)
        if record is None:
            return CommandResult(success=False, message=f"Node '{name}' does not exist.")

        busy = [
            port for port in (record["server_port"], record["swarm_port"])
            if not _port_available(port)
        ]
        if busy:
            return CommandResult(
                success=False,
                message=f"Port(s) already in use: {', '.join(str(p) for p in busy)}",
            )

        try:
            process = await asyncio.create_subprocess_exec(
                self._binary, "--node-name", name, "--home", str(self._nodes_dir), "run",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SupervisorError(f"Failed to spawn node process: {e}", backend="local") from e

        node = NodeProcess(process)
        for stream in (process.stdout, process.stderr):
            node.readers.append(asyncio.create_task(self._pump_output(name, node, stream)))
        self._processes[name] = node
        logger.info("Started node %s (pid=%d)", name, process.pid)
        return CommandResult(
            success=True,
            message="Node start command issued. Check the output for status.",
        )

    async def stop_node(self, name: str) -> CommandResult:
        if not self.is_running(name):
            return CommandResult(success=False, message=f"Node '{name}' is not running.")

        node = self._processes[name]
        process = node.process
        try:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=self._stop_timeout)
            except asyncio.TimeoutError:
                logger.warning("Node %s did not exit after SIGTERM, killing", name)
                process.kill()
                await process.wait()
        except ProcessLookupError:
            pass
        await asyncio.gather(*node.readers, return_exceptions=True)

        timestamp = datetime.now().strftime("%Y-%m-%dT%H:%M:%S.%f")
        self._write_log(name, f"{timestamp} Node '{name}' has been stopped successfully.")
        logger.info("Stopped node %s", name)
        return CommandResult(success=True, message=f"Node '{name}' has been stopped successfully.")

    async def start_auto_nodes(self) -> dict[str, CommandResult]:
        """Start every node flagged for auto-start that is not running yet."""
        results = {}
        for node in await self.fetch_nodes():
            if node.auto_start and not node.is_running:
                try:
                    results[node.name] = await self.start_node(node.name)
                except SupervisorError as e:
                    logger.error("Auto-start of %s failed: %s", node.name, e)
                    results[node.name] = CommandResult(success=False, message=str(e))
        return results

    async def send_input(self, name: str, text: str) -> CommandResult:
        node = self._processes.get(name)
        if node is None:
            raise SupervisorError(f"Node not found: {name}", backend="local")
        if not node.is_alive or node.process.stdin is None:
            raise SupervisorError(f"Node is not running: {name}", backend="local")

        self._write_log(name, f"STDIN: {text}")
        try:
            node.process.stdin.write(f"{text}\n".encode())
            await node.process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise SupervisorError(f"Failed to send input: {e}", backend="local") from e
        return CommandResult(success=True, message="Input sent successfully")

    # ------------------------------------------------------------------
    # Output and logs
    # ------------------------------------------------------------------

    async def get_current_output(self, name: str) -> TextResult:
        node = self._processes.get(name)
        if node is None:
            return TextResult(success=False, message=f"Node not found: {name}")
        return TextResult(success=True, text="".join(node.output))

    async def get_log(self, name: str) -> TextResult:
        log_path = self._nodes_dir / name / LOG_FILE
        if not log_path.exists():
            return TextResult(success=False, message=f"No log file for node '{name}'.")
        try:
            text = log_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SupervisorError(f"Failed to read log file: {e}", backend="local") from e
        return TextResult(success=True, text=text)

    async def open_admin_dashboard(self, name: str) -> CommandResult:
        if not self.is_running(name):
            return CommandResult(success=False, message="Node is not running")
        record = self._read_record(name)
        if record is None:
            return CommandResult(success=False, message=f"Node '{name}' does not exist.")
        url = self._dashboard_url_template.format(server_port=record["server_port"], name=name)
        opened = await asyncio.to_thread(webbrowser.open, url)
        if not opened:
            return CommandResult(success=False, message=f"Could not open a browser for {url}")
        return CommandResult(success=True, message=f"Opened admin dashboard at {url}")

    async def _pump_output(
        self,
        name: str,
        node: NodeProcess,
        stream: asyncio.StreamReader | None,
    ) -> None:
        """Forward lines from one of the node's output pipes."""
        if stream is None:
            return
        channel = channel_for(name, self._channel_prefix)
        while True:
            raw = await stream.readline()
            if not raw:
                break
            line = strip_ansi_escapes(raw.decode("utf-8", errors="replace").rstrip("\r\n"))
            node.output.append(f"{line}\n")
            try:
                self._write_log(name, line)
            except OSError as e:
                logger.error("Failed to log output of %s: %s", name, e)
            self._events.publish(channel, f"{line}\n")
        logger.debug("Output stream of %s closed", name)

    async def _run_binary(self, name: str, *args: str) -> tuple[int, str, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                self._binary, "--node-name", name, "--home", str(self._nodes_dir), *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            raise SupervisorError(f"Failed to run {self._binary}: {e}", backend="local") from e
        return (
            process.returncode or 0,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    # ------------------------------------------------------------------
    # Node directory helpers
    # ------------------------------------------------------------------

    def _read_record(self, name: str) -> dict | None:
        path = self._nodes_dir / name / RECORD_FILE
        if not path.exists():
            return None
        try:
            with open(path) as f:
                record = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Unreadable node record %s: %s", path, e)
            return None
        if "server_port" not in record or "swarm_port" not in record:
            logger.warning("Node record %s is missing ports", path)
            return None
        return record

    def _write_record(self, name: str, server_port: int, swarm_port: int, auto_start: bool) -> None:
        node_dir = self._nodes_dir / name
        node_dir.mkdir(parents=True, exist_ok=True)
        record = {"server_port": server_port, "swarm_port": swarm_port, "auto_start": auto_start}
        with open(node_dir / RECORD_FILE, "w") as f:
            yaml.safe_dump(record, f, default_flow_style=False)

    def _write_log(self, name: str, line: str) -> None:
        log_path = self._nodes_dir / name / LOG_FILE
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(f"{line}\n")
        if log_path.stat().st_size > self._max_log_bytes:
            log_path.write_bytes(trim_to_tail(log_path.read_bytes(), self._max_log_bytes))


def _validate(name: str, server_port: int, swarm_port: int) -> str | None:
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        return f"Invalid node name: {name!r}"
    for port in (server_port, swarm_port):
        if not 1 <= port <= 65535:
            return f"Invalid port: {port}"
    if server_port == swarm_port:
        return "Server and swarm ports must differ"
    return None


def _port_available(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(("0.0.0.0", port))
        except OSError:
            return False
    return True
