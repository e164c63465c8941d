"""Keyboard-driven autocomplete over a CommandGrammar."""

from __future__ import annotations

import logging

from nodeconsole.console.grammar import CommandGrammar, suggest
from nodeconsole.domain.models import Suggestion, SuggestionLevel, SuggestionState

logger = logging.getLogger(__name__)


class AutocompleteEngine:
    """Tracks the input buffer, its suggestions and the highlighted entry.

    Example usage::

        engine = AutocompleteEngine(grammar)
        engine.set_text("context j")
        engine.next()
        engine.accept()        # -> "context join"
    """

    def __init__(self, grammar: CommandGrammar, marker: str = "/") -> None:
        self._grammar = grammar
        self._marker = marker
        self._text = ""
        self._suggestions: tuple[Suggestion, ...] = ()
        self._selected_index: int | None = None
        self._visible = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def suggestions(self) -> tuple[Suggestion, ...]:
        return self._suggestions

    @property
    def candidates(self) -> tuple[str, ...]:
        return tuple(s.label for s in self._suggestions)

    @property
    def selected_index(self) -> int | None:
        return self._selected_index

    @property
    def is_visible(self) -> bool:
        """Whether the suggestion list should currently be displayed."""
        return self._visible and bool(self._suggestions)

    @property
    def state(self) -> SuggestionState:
        return SuggestionState(candidates=self.candidates, selected_index=self._selected_index)

    def set_text(self, text: str) -> tuple[str, ...]:
        """Replace the input buffer and recompute suggestions.

        Returns the new candidate labels. The highlighted index is reset.
        """
        self._text = text
        self._suggestions = tuple(suggest(text, self._grammar, self._marker))
        self._selected_index = None
        self._visible = bool(self._suggestions)
        return self.candidates

    def clear(self) -> None:
        self.set_text("")

    def next(self) -> int | None:
        """Move the highlight down, stopping at the last candidate."""
        if not self._suggestions:
            return None
        if self._selected_index is None:
            self._selected_index = 0
        else:
            self._selected_index = min(self._selected_index + 1, len(self._suggestions) - 1)
        return self._selected_index

    def previous(self) -> int | None:
        """Move the highlight up, stopping at the first candidate."""
        if not self._suggestions:
            return None
        if self._selected_index is None:
            self._selected_index = 0
        else:
            self._selected_index = max(self._selected_index - 1, 0)
        return self._selected_index

    def accept(self, index: int | None = None) -> str | None:
        """Apply a candidate to the input buffer.

        Uses ``index`` when given, otherwise the highlighted candidate.
        Returns the new input text, or None when there is nothing to accept.
        """
        if index is None:
            index = self._selected_index
        if index is None or not 0 <= index < len(self._suggestions):
            return None

        suggestion = self._suggestions[index]
        prefix = self._marker if self._marker and self._text.startswith(self._marker) else ""
        if suggestion.level is SuggestionLevel.SUBCOMMAND:
            command = self._text[len(prefix):].split(" ", 1)[0]
            text = f"{prefix}{command} {suggestion.value}"
        else:
            text = f"{prefix}{suggestion.value}"

        logger.debug("Accepted suggestion %r -> %r", suggestion.label, text)
        self._text = text
        self._suggestions = ()
        self._selected_index = None
        self._visible = False
        return text

    def cancel(self) -> None:
        """Hide the suggestion list, leaving the input text as it is."""
        self._visible = False
