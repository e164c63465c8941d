"""Domain models for nodeconsole.

This package contains the core data structures, enumerations, and value
objects used throughout the system. All models use Pydantic v2 for
validation and serialization.
"""

from nodeconsole.domain.models import (
    CommandResult,
    NodePorts,
    NodeSummary,
    Notice,
    NoticeLevel,
    SessionState,
    Subscription,
    Suggestion,
    SuggestionLevel,
    SuggestionState,
    SupervisorResult,
    TextResult,
)

__all__ = [
    "CommandResult",
    "NodePorts",
    "NodeSummary",
    "Notice",
    "NoticeLevel",
    "SessionState",
    "Subscription",
    "Suggestion",
    "SuggestionLevel",
    "SuggestionState",
    "SupervisorResult",
    "TextResult",
]
