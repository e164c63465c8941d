"""Tests for the AutocompleteEngine."""

from __future__ import annotations

import pytest

from nodeconsole.console.autocomplete import AutocompleteEngine
from nodeconsole.console.grammar import CommandGrammar


@pytest.fixture
def engine(small_grammar: CommandGrammar) -> AutocompleteEngine:
    return AutocompleteEngine(small_grammar)


class TestSuggestions:
    def test_set_text_returns_candidates(self, engine: AutocompleteEngine) -> None:
        assert engine.set_text("co") == ("context [ls|join|leave]",)
        assert engine.is_visible is True
        assert engine.selected_index is None

    def test_set_text_resets_index(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        engine.next()
        engine.set_text("co")
        assert engine.selected_index is None

    def test_no_candidates_is_not_visible(self, engine: AutocompleteEngine) -> None:
        engine.set_text("xyz")
        assert engine.candidates == ()
        assert engine.is_visible is False

    def test_state_snapshot(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        engine.next()
        state = engine.state
        assert state.candidates == (
            "call [<ctx> <method> <payload> <key>]",
            "context [ls|join|leave]",
        )
        assert state.selected_index == 0

    def test_clear(self, engine: AutocompleteEngine) -> None:
        engine.set_text("co")
        engine.clear()
        assert engine.text == ""
        assert engine.candidates == ()


class TestNavigation:
    def test_next_from_none_selects_first(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        assert engine.next() == 0

    def test_previous_from_none_selects_first(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        assert engine.previous() == 0

    def test_next_clamps_at_last(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        engine.next()
        engine.next()
        assert engine.next() == 1

    def test_previous_clamps_at_first(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        engine.next()
        engine.next()
        engine.previous()
        assert engine.previous() == 0

    def test_navigation_without_candidates(self, engine: AutocompleteEngine) -> None:
        engine.set_text("xyz")
        assert engine.next() is None
        assert engine.previous() is None


class TestAccept:
    def test_accept_subcommand(self, engine: AutocompleteEngine) -> None:
        engine.set_text("context j")
        assert engine.accept(0) == "context join"
        assert engine.text == "context join"
        assert engine.is_visible is False

    def test_accept_command(self, engine: AutocompleteEngine) -> None:
        engine.set_text("co")
        assert engine.accept(0) == "context"

    def test_accept_highlighted(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        engine.next()
        engine.next()
        assert engine.accept() == "context"

    def test_accept_keeps_marker(self, engine: AutocompleteEngine) -> None:
        engine.set_text("/context l")
        assert engine.accept(0) == "/context ls"

    def test_accept_keeps_typed_command_case(self, engine: AutocompleteEngine) -> None:
        engine.set_text("CONTEXT le")
        assert engine.accept(0) == "CONTEXT leave"

    def test_accept_nothing_highlighted(self, engine: AutocompleteEngine) -> None:
        engine.set_text("c")
        assert engine.accept() is None
        assert engine.text == "c"

    def test_accept_out_of_range(self, engine: AutocompleteEngine) -> None:
        engine.set_text("co")
        assert engine.accept(5) is None

    def test_cancel_hides_list(self, engine: AutocompleteEngine) -> None:
        engine.set_text("co")
        engine.cancel()
        assert engine.is_visible is False
        assert engine.text == "co"
        assert engine.candidates == ("context [ls|join|leave]",)
