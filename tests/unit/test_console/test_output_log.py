"""Tests for the OutputLog buffer."""

from __future__ import annotations

from nodeconsole.console.output_log import OutputLog


class TestOutputLog:
    def test_starts_empty(self) -> None:
        log = OutputLog()
        assert len(log) == 0
        assert log.snapshot() == ""

    def test_append_preserves_order_and_duplicates(self) -> None:
        log = OutputLog()
        for fragment in ("a\n", "b\n", "a\n"):
            log.append(fragment)
        assert log.fragments == ("a\n", "b\n", "a\n")
        assert log.snapshot() == "a\nb\na\n"

    def test_empty_fragment_ignored(self) -> None:
        log = OutputLog()
        log.append("")
        assert len(log) == 0

    def test_reset(self) -> None:
        log = OutputLog()
        log.append("x")
        log.reset()
        assert log.fragments == ()

    def test_fragments_is_a_copy(self) -> None:
        log = OutputLog()
        log.append("x")
        fragments = log.fragments
        log.append("y")
        assert fragments == ("x",)

    def test_reset_advances_epoch(self) -> None:
        log = OutputLog()
        start = log.epoch
        log.reset()
        log.reset()
        assert log.epoch == start + 2
