"""FastAPI HTTP server exposing a LocalSupervisor.

Serves the supervisor command interface as JSON routes and streams node
output events, so consoles on other machines (or in other processes)
can use HttpSupervisor and HttpEventSource against it.

    GET    /health                  -> {"status": "ok", ...}
    GET    /nodes                   -> [NodeSummary, ...]
    POST   /nodes                   <- {"name", "server_port", "swarm_port", "auto_start"}
    PUT    /nodes/{name}            <- {"name", "server_port", "swarm_port", "auto_start"}
    DELETE /nodes/{name}
    POST   /nodes/{name}/start
    POST   /nodes/{name}/stop
    POST   /nodes/{name}/input      <- {"text": "context ls"}
    POST   /nodes/{name}/dashboard
    GET    /nodes/{name}/output     -> TextResult
    GET    /nodes/{name}/log        -> TextResult
    GET    /events/{channel}        -> JSON lines stream
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from nodeconsole.domain.models import CommandResult, NodeSummary, TextResult
from nodeconsole.supervisor.base import SupervisorError
from nodeconsole.supervisor.process import LocalSupervisor

logger = logging.getLogger(__name__)


class NodeConfigRequest(BaseModel):
    name: str = Field(min_length=1, description="Node name")
    server_port: int = Field(ge=1, le=65535)
    swarm_port: int = Field(ge=1, le=65535)
    auto_start: bool = Field(default=False)


class InputRequest(BaseModel):
    text: str = Field(description="Line to write to the node's stdin")


class EndpointStatus(BaseModel):
    status: str = "ok"
    nodes_dir: str = ""
    running_nodes: int = 0


def create_app(
    supervisor: LocalSupervisor,
    auto_start: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await supervisor.connect()
        if auto_start:
            results = await supervisor.start_auto_nodes()
            for name, result in results.items():
                logger.info("Auto-start %s: %s", name, result.message)
        logger.info("Supervisor endpoint started (%s)", supervisor.nodes_dir)
        yield
        await supervisor.disconnect()
        await supervisor.events.close()
        logger.info("Supervisor endpoint stopped")

    app = FastAPI(
        title="nodeconsole Supervisor",
        description="HTTP interface to the local node supervisor",
        version="0.1.0",
        lifespan=lifespan,
    )

    async def run(coro) -> CommandResult | TextResult:
        try:
            return await coro
        except SupervisorError as e:
            logger.error("Supervisor call failed: %s", e)
            raise HTTPException(status_code=500, detail=str(e)) from e

    @app.get("/health")
    async def health_check() -> EndpointStatus:
        nodes = await supervisor.fetch_nodes()
        return EndpointStatus(
            status="ok",
            nodes_dir=str(supervisor.nodes_dir),
            running_nodes=sum(1 for n in nodes if n.is_running),
        )

    @app.get("/nodes")
    async def list_nodes() -> list[NodeSummary]:
        try:
            return await supervisor.fetch_nodes()
        except SupervisorError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e

    @app.post("/nodes")
    async def initialize_node(request: NodeConfigRequest) -> CommandResult:
        return await run(supervisor.initialize_node(
            request.name, request.server_port, request.swarm_port, request.auto_start,
        ))

    @app.put("/nodes/{name}")
    async def update_node(name: str, request: NodeConfigRequest) -> CommandResult:
        return await run(supervisor.update_node_config(
            name, request.name, request.server_port, request.swarm_port, request.auto_start,
        ))

    @app.delete("/nodes/{name}")
    async def delete_node(name: str) -> CommandResult:
        return await run(supervisor.delete_node(name))

    @app.post("/nodes/{name}/start")
    async def start_node(name: str) -> CommandResult:
        return await run(supervisor.start_node(name))

    @app.post("/nodes/{name}/stop")
    async def stop_node(name: str) -> CommandResult:
        return await run(supervisor.stop_node(name))

    @app.post("/nodes/{name}/input")
    async def send_input(name: str, request: InputRequest) -> CommandResult:
        return await run(supervisor.send_input(name, request.text))

    @app.post("/nodes/{name}/dashboard")
    async def open_dashboard(name: str) -> CommandResult:
        return await run(supervisor.open_admin_dashboard(name))

    @app.get("/nodes/{name}/output")
    async def current_output(name: str) -> TextResult:
        return await run(supervisor.get_current_output(name))

    @app.get("/nodes/{name}/log")
    async def node_log(name: str) -> TextResult:
        return await run(supervisor.get_log(name))

    @app.get("/events/{channel}")
    async def stream_events(channel: str) -> StreamingResponse:
        return StreamingResponse(
            _event_lines(supervisor, channel),
            media_type="application/x-ndjson",
        )

    return app


async def _event_lines(supervisor: LocalSupervisor, channel: str) -> AsyncIterator[str]:
    """Subscribe first, confirm, then relay every payload as a JSON line."""
    queue: asyncio.Queue[str] = asyncio.Queue()
    subscription = await supervisor.events.subscribe(channel, queue.put_nowait)
    try:
        yield json.dumps({"subscribed": channel}) + "\n"
        while True:
            payload = await queue.get()
            yield json.dumps({"payload": payload}) + "\n"
    finally:
        await supervisor.events.unsubscribe(subscription)


def main() -> None:
    """Entry point for running the endpoint standalone."""
    from nodeconsole.cli import build_backends
    from nodeconsole.config.settings import load_settings

    settings = load_settings()
    settings.supervisor.backend = "local"
    supervisor, _ = build_backends(settings)
    uvicorn.run(create_app(supervisor), host=settings.endpoint.host, port=settings.endpoint.port)


if __name__ == "__main__":
    main()
