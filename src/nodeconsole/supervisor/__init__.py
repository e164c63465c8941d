"""Process supervisor module for nodeconsole.

Abstract interface to whatever creates and runs node processes, with an
in-process implementation and an HTTP client for a remote endpoint.

Public API:
    Supervisor -- Abstract base class
    LocalSupervisor -- In-process node process manager
    HttpSupervisor -- HTTP client for the supervisor endpoint
"""

from nodeconsole.supervisor.base import Supervisor, SupervisorError

__all__ = ["Supervisor", "SupervisorError", "LocalSupervisor", "HttpSupervisor"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "LocalSupervisor":
        from nodeconsole.supervisor.process import LocalSupervisor
        return LocalSupervisor
    if name == "HttpSupervisor":
        from nodeconsole.supervisor.http_backend import HttpSupervisor
        return HttpSupervisor
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
