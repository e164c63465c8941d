"""Command-line interface for nodeconsole.

Provides the main entry point for serving the supervisor endpoint,
managing nodes and running the interactive node console.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

CONSOLE_HELP = """\
Console directives:
  :nodes              list nodes
  :refresh            reload the node list
  :select NAME        observe NAME (re-selecting restarts the session)
  :start / :stop      start or stop the selected node
  :logs               print the selected node's log file
  :dashboard          open the selected node's admin dashboard
  :complete TEXT      show completions for TEXT
  :help               show this help
  :quit               leave the console
Any other line is sent to the selected node."""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="nodeconsole",
        description="Operator console for supervised node processes",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/nodeconsole.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("endpoint", help="Serve the local supervisor over HTTP")
    subparsers.add_parser("nodes", help="List nodes and their status")

    init_parser = subparsers.add_parser("init", help="Initialize a new node")
    init_parser.add_argument("name", help="Node name")
    init_parser.add_argument("--server-port", type=int, required=True)
    init_parser.add_argument("--swarm-port", type=int, required=True)
    init_parser.add_argument(
        "--auto-start", action="store_true",
        help="Start the node whenever the supervisor starts",
    )

    logs_parser = subparsers.add_parser("logs", help="Print a node's log file")
    logs_parser.add_argument("name", help="Node name")

    console_parser = subparsers.add_parser("console", help="Run the interactive node console")
    console_parser.add_argument("--node", type=str, default=None, help="Node to select on startup")

    return parser.parse_args(argv)


def build_backends(settings):
    """Create the supervisor and event source selected in the settings."""
    sup = settings.supervisor
    if sup.backend == "http":
        from nodeconsole.events.http_stream import HttpEventSource
        from nodeconsole.supervisor.http_backend import HttpSupervisor

        return (
            HttpSupervisor(base_url=sup.http_base_url, timeout=sup.http_timeout),
            HttpEventSource(base_url=sup.http_base_url, timeout=sup.http_timeout),
        )

    from nodeconsole.supervisor.process import LocalSupervisor

    supervisor = LocalSupervisor(
        nodes_dir=sup.nodes_dir,
        node_binary=sup.node_binary,
        max_log_bytes=sup.max_log_bytes,
        dashboard_url_template=sup.dashboard_url_template,
        channel_prefix=settings.console.channel_prefix,
    )
    return supervisor, supervisor.events


async def _list_nodes(settings) -> None:
    supervisor, events = build_backends(settings)
    async with supervisor:
        nodes = await supervisor.fetch_nodes()
    await events.close()
    if not nodes:
        print("No nodes found.")
        return
    print(f"{'NAME':<20} {'STATUS':<8} {'SERVER':>6} {'SWARM':>6}  AUTO-START")
    for node in nodes:
        status = "running" if node.is_running else "stopped"
        print(
            f"{node.name:<20} {status:<8} {node.ports.server_port:>6} "
            f"{node.ports.swarm_port:>6}  {'yes' if node.auto_start else 'no'}"
        )


async def _init_node(settings, args) -> int:
    supervisor, events = build_backends(settings)
    async with supervisor:
        result = await supervisor.initialize_node(
            args.name, args.server_port, args.swarm_port, args.auto_start,
        )
    await events.close()
    print(result.message)
    return 0 if result.success else 1


async def _print_log(settings, name: str) -> int:
    supervisor, events = build_backends(settings)
    async with supervisor:
        result = await supervisor.get_log(name)
    await events.close()
    print(result.text if result.success else result.message)
    return 0 if result.success else 1


async def _run_console(settings, node_name: str | None) -> None:
    """Interactive line console over the selected node's session."""
    from nodeconsole.console.facade import Console
    from nodeconsole.domain.models import Notice

    supervisor, events = build_backends(settings)
    async with supervisor:
        console = Console.from_settings(settings, supervisor, events)
        printer = asyncio.create_task(_print_output(console))
        try:
            notice = await console.refresh()
            if notice:
                print(f"[{notice.title}] {notice.message}")
            if node_name:
                await console.select(node_name)
            print(CONSOLE_HELP)

            while True:
                prompt = f"{console.selected.name if console.selected else '-'}> "
                try:
                    line = await asyncio.to_thread(input, prompt)
                except EOFError:
                    break
                if not line.startswith(":"):
                    await console.submit(line)
                    continue

                directive, _, argument = line[1:].partition(" ")
                if directive == "quit":
                    break
                result = await _run_directive(console, directive, argument.strip())
                if isinstance(result, Notice):
                    print(f"[{result.title or result.level.value}] {result.message}")
                elif result:
                    print(result)
        finally:
            printer.cancel()
            try:
                await printer
            except asyncio.CancelledError:
                pass
            await console.close()
            await events.close()


async def _run_directive(console, directive: str, argument: str):
    """Execute one ``:directive``; returns text or a Notice to show."""
    from nodeconsole.domain.models import Notice, TextResult

    if directive == "help":
        return CONSOLE_HELP
    if directive == "nodes":
        return "\n".join(
            f"{'*' if console.selected and n.name == console.selected.name else ' '} "
            f"{n.name} ({'running' if n.is_running else 'stopped'})"
            for n in console.nodes
        ) or "No nodes found."
    if directive == "refresh":
        return await console.refresh()
    if directive == "select":
        node = await console.select(argument or None)
        return f"Selected {node.name}" if node else f"No node named {argument!r}"
    if directive in ("start", "stop"):
        # Results are written to the output log; only notices need printing.
        result = await (console.start() if directive == "start" else console.stop())
        return result if isinstance(result, Notice) else None
    if directive == "logs":
        result = await console.node_log()
        if isinstance(result, TextResult):
            return result.text if result.success else result.message
        return result
    if directive == "dashboard":
        result = await console.open_admin_dashboard()
        return result if isinstance(result, Notice) else result.message
    if directive == "complete":
        candidates = console.type(argument)
        return "\n".join(candidates) or "(no suggestions)"
    return f"Unknown directive :{directive} (try :help)"


async def _print_output(console) -> None:
    """Periodically print output fragments appended since the last pass."""
    cursor = (console.session.log.epoch, 0)
    while True:
        fragments, cursor = _unprinted(console.session.log, cursor)
        if fragments:
            sys.stdout.write("".join(fragments))
            sys.stdout.flush()
        await asyncio.sleep(0.1)


def _unprinted(log, cursor: tuple[int, int]) -> tuple[tuple[str, ...], tuple[int, int]]:
    """Fragments of ``log`` past ``cursor`` and the advanced cursor.

    The cursor is ``(epoch, printed)``; a log reset since the last call
    restarts printing from its first fragment.
    """
    epoch, printed = cursor
    if log.epoch != epoch:
        printed = 0
    fragments = log.fragments
    return fragments[printed:], (log.epoch, len(fragments))


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the nodeconsole CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from nodeconsole.config.settings import load_settings
    from nodeconsole.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging, quiet=args.command == "console")

    if args.command == "endpoint":
        logger.info("Starting supervisor endpoint")
        from nodeconsole.endpoint.server import create_app
        from nodeconsole.supervisor.process import LocalSupervisor
        import uvicorn

        supervisor, _ = build_backends(settings)
        if not isinstance(supervisor, LocalSupervisor):
            sys.exit("The endpoint serves the local supervisor; set supervisor.backend to 'local'")
        uvicorn.run(
            create_app(supervisor),
            host=settings.endpoint.host,
            port=settings.endpoint.port,
        )

    elif args.command == "nodes":
        asyncio.run(_list_nodes(settings))

    elif args.command == "init":
        sys.exit(asyncio.run(_init_node(settings, args)))

    elif args.command == "logs":
        sys.exit(asyncio.run(_print_log(settings, args.name)))

    elif args.command == "console":
        logger.info("Starting console")
        asyncio.run(_run_console(settings, args.node))


if __name__ == "__main__":
    main()
