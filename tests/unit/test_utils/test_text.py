"""Tests for node output text helpers."""

from __future__ import annotations

from nodeconsole.utils.text import strip_ansi_escapes, trim_to_tail


class TestStripAnsiEscapes:
    def test_removes_colour_codes(self) -> None:
        assert strip_ansi_escapes("\x1b[1;32mINFO\x1b[0m started") == "INFO started"

    def test_plain_text_unchanged(self) -> None:
        assert strip_ansi_escapes("context ls") == "context ls"


class TestTrimToTail:
    def test_short_data_unchanged(self) -> None:
        assert trim_to_tail(b"abc\n", 10) == b"abc\n"

    def test_cuts_at_line_start(self) -> None:
        data = b"first line\nsecond\nthird\n"
        assert trim_to_tail(data, 12) == b"third\n"

    def test_no_newline_in_tail(self) -> None:
        assert trim_to_tail(b"abcdefgh", 3) == b"fgh"
