"""Append-only output buffer for the active node session."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class OutputLog:
    """Ordered text fragments of the current session.

    Fragments are kept exactly as appended: no reordering, merging or
    deduplication. The log is only reset when the console switches to
    another subscription target.
    """

    def __init__(self) -> None:
        self._fragments: list[str] = []
        self._epoch = 0

    @property
    def epoch(self) -> int:
        """Number of resets so far; readers use it to notice a new session."""
        return self._epoch

    @property
    def fragments(self) -> tuple[str, ...]:
        return tuple(self._fragments)

    def __len__(self) -> int:
        return len(self._fragments)

    def append(self, fragment: str) -> None:
        if fragment:
            self._fragments.append(fragment)

    def snapshot(self) -> str:
        return "".join(self._fragments)

    def reset(self) -> None:
        logger.debug("Output log reset (%d fragments dropped)", len(self._fragments))
        self._fragments = []
        self._epoch += 1
