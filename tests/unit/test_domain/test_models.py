"""Tests for the domain models."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from nodeconsole.domain.models import (
    CommandResult,
    NodePorts,
    NodeSummary,
    Notice,
    NoticeLevel,
    SupervisorResult,
    TextResult,
)


class TestSupervisorResult:
    def test_discriminates_on_kind(self) -> None:
        adapter = TypeAdapter(SupervisorResult)
        text = adapter.validate_python({"kind": "text", "success": True, "text": "boot\n"})
        command = adapter.validate_python({"kind": "command", "success": False, "message": "no"})
        assert isinstance(text, TextResult)
        assert isinstance(command, CommandResult)

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TypeAdapter(SupervisorResult).validate_python({"kind": "list", "success": True})


class TestNodeSummary:
    def test_frozen(self, alpha: NodeSummary) -> None:
        with pytest.raises(ValidationError):
            alpha.is_running = False  # type: ignore[misc]

    def test_port_range(self) -> None:
        with pytest.raises(ValidationError):
            NodePorts(server_port=0, swarm_port=2528)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            NodeSummary(name="", ports=NodePorts(server_port=1, swarm_port=2))


class TestNotice:
    def test_defaults_to_info(self) -> None:
        notice = Notice(message="Node is already running.")
        assert notice.level is NoticeLevel.INFO
        assert notice.title == ""
