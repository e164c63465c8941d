"""Text cleanup helpers for node output."""

from __future__ import annotations

import re

# SGR sequences only (colours, bold); node output uses nothing else.
_ANSI_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi_escapes(text: str) -> str:
    """Remove ANSI colour escape sequences from ``text``."""
    return _ANSI_SGR_RE.sub("", text)


def trim_to_tail(data: bytes, max_bytes: int) -> bytes:
    """Keep at most the last ``max_bytes`` of ``data``, cut at a line start."""
    if len(data) <= max_bytes:
        return data
    tail = data[-max_bytes:]
    newline = tail.find(b"\n")
    return tail[newline + 1:] if newline != -1 else tail
