"""Core domain models for the nodeconsole system.

These models represent the data flowing between the console and the
process supervisor: node summaries from the registry, tagged command
results, subscription handles, operator notices and autocomplete
suggestions.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Lifecycle state of the console's output subscription."""

    IDLE = "idle"  # No node is being observed
    SUBSCRIBING = "subscribing"  # Subscribe issued, not yet seeded
    LIVE = "live"  # Subscription active, output flowing
    UNSUBSCRIBING = "unsubscribing"  # Teardown in progress


class NoticeLevel(str, enum.Enum):
    """Severity of an operator-facing notice."""

    INFO = "info"
    ERROR = "error"


class SuggestionLevel(str, enum.Enum):
    """Which token position a suggestion completes."""

    COMMAND = "command"
    SUBCOMMAND = "subcommand"


# ---------------------------------------------------------------------------
# Node Registry Models
# ---------------------------------------------------------------------------


class NodePorts(BaseModel):
    """Network ports a node listens on."""

    model_config = ConfigDict(frozen=True)

    server_port: int = Field(ge=1, le=65535, description="Port of the node's HTTP server")
    swarm_port: int = Field(ge=1, le=65535, description="Port of the node's p2p swarm")


class NodeSummary(BaseModel):
    """Backend-reported summary of one node.

    Summaries are replaced wholesale on every registry refresh and are
    never edited in place by the console.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Unique node name")
    is_running: bool = Field(default=False, description="Whether the node process is alive")
    auto_start: bool = Field(default=False, description="Start the node when the supervisor boots")
    ports: NodePorts


# ---------------------------------------------------------------------------
# Supervisor Result Models (discriminated union)
# ---------------------------------------------------------------------------


class CommandResult(BaseModel):
    """Outcome of a supervisor command that carries no payload."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["command"] = "command"
    success: bool
    message: str = ""


class TextResult(BaseModel):
    """Outcome of a supervisor command that returns text (output, logs)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    success: bool
    message: str = ""
    text: str | None = Field(default=None, description="Returned text, present on success")


SupervisorResult = Annotated[
    Union[CommandResult, TextResult],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Session Models
# ---------------------------------------------------------------------------


class Subscription(BaseModel):
    """Handle for a live output subscription on one event channel."""

    model_config = ConfigDict(frozen=True)

    subscription_id: str = Field(description="Opaque identifier issued by the event source")
    channel: str = Field(description="Channel key, e.g. 'node-output-alpha'")


class Notice(BaseModel):
    """An informational or error message meant for the operator.

    Notices are what the console returns instead of raising: user
    guidance ("already running"), refresh failures and the like.
    """

    model_config = ConfigDict(frozen=True)

    level: NoticeLevel = NoticeLevel.INFO
    title: str = ""
    message: str


# ---------------------------------------------------------------------------
# Autocomplete Models
# ---------------------------------------------------------------------------


class Suggestion(BaseModel):
    """One autocomplete candidate."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Text shown to the operator, e.g. 'context [ls|join]'")
    value: str = Field(description="Bare token inserted on acceptance")
    level: SuggestionLevel


class SuggestionState(BaseModel):
    """Derived suggestion list plus the keyboard-highlighted entry."""

    model_config = ConfigDict(frozen=True)

    candidates: tuple[str, ...] = ()
    selected_index: int | None = None
