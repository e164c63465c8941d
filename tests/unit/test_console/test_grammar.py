"""Tests for CommandGrammar and the suggest() function."""

from __future__ import annotations

import pytest

from nodeconsole.config.settings import DEFAULT_GRAMMAR
from nodeconsole.console.grammar import CommandGrammar, strip_marker, suggest
from nodeconsole.domain.models import SuggestionLevel


def labels(text: str, grammar: CommandGrammar, marker: str = "/") -> list[str]:
    return [s.label for s in suggest(text, grammar, marker)]


class TestCommandGrammar:
    def test_commands_keep_declaration_order(self, small_grammar: CommandGrammar) -> None:
        assert small_grammar.commands == ("call", "context")

    def test_subcommands_case_insensitive(self, small_grammar: CommandGrammar) -> None:
        assert small_grammar.subcommands("CONTEXT") == ("ls", "join", "leave")

    def test_subcommands_unknown_command(self, small_grammar: CommandGrammar) -> None:
        assert small_grammar.subcommands("identity") is None

    def test_label_joins_subcommands(self, small_grammar: CommandGrammar) -> None:
        assert small_grammar.label("context") == "context [ls|join|leave]"

    def test_label_without_subcommands(self) -> None:
        grammar = CommandGrammar({"peers": []})
        assert grammar.label("peers") == "peers"

    def test_contains(self, small_grammar: CommandGrammar) -> None:
        assert "Context" in small_grammar
        assert "pool" not in small_grammar
        assert 42 not in small_grammar

    def test_grammar_is_not_affected_by_source_mutation(self) -> None:
        source = {"context": ["ls"]}
        grammar = CommandGrammar(source)
        source["context"].append("join")
        source["identity"] = []
        assert grammar.subcommands("context") == ("ls",)
        assert len(grammar) == 1

    def test_equality(self, small_grammar: CommandGrammar) -> None:
        same = CommandGrammar({
            "call": ["<ctx> <method> <payload> <key>"],
            "context": ["ls", "join", "leave"],
        })
        assert small_grammar == same
        assert small_grammar != CommandGrammar({"context": ["ls"]})

    def test_default_grammar_is_valid(self) -> None:
        grammar = CommandGrammar(DEFAULT_GRAMMAR)
        assert "context" in grammar
        assert "join" in grammar.subcommands("context")


class TestStripMarker:
    def test_strips_one_marker(self) -> None:
        assert strip_marker("/context") == "context"
        assert strip_marker("//context") == "/context"

    def test_no_marker(self) -> None:
        assert strip_marker("context") == "context"

    def test_empty_marker(self) -> None:
        assert strip_marker("/context", marker="") == "/context"


class TestSuggest:
    def test_command_prefix(self, small_grammar: CommandGrammar) -> None:
        assert labels("co", small_grammar) == ["context [ls|join|leave]"]

    def test_subcommand_prefix(self, small_grammar: CommandGrammar) -> None:
        suggestions = suggest("context j", small_grammar)
        assert [s.label for s in suggestions] == ["join"]
        assert suggestions[0].level is SuggestionLevel.SUBCOMMAND

    def test_marker_is_ignored_for_matching(self, small_grammar: CommandGrammar) -> None:
        assert labels("/co", small_grammar) == ["context [ls|join|leave]"]

    def test_command_match_is_case_insensitive(self, small_grammar: CommandGrammar) -> None:
        assert labels("CO", small_grammar) == ["context [ls|join|leave]"]

    def test_single_char_matches_all_in_order(self, small_grammar: CommandGrammar) -> None:
        assert [s.value for s in suggest("c", small_grammar)] == ["call", "context"]

    def test_empty_input_has_no_suggestions(self, small_grammar: CommandGrammar) -> None:
        assert suggest("", small_grammar) == []
        assert suggest("/", small_grammar) == []

    def test_trailing_space_lists_all_subcommands(self, small_grammar: CommandGrammar) -> None:
        assert labels("context ", small_grammar) == ["ls", "join", "leave"]

    def test_unknown_command_has_no_subcommands(self, small_grammar: CommandGrammar) -> None:
        assert suggest("identity l", small_grammar) == []

    def test_placeholder_subcommand(self, small_grammar: CommandGrammar) -> None:
        assert labels("call ", small_grammar) == ["<ctx> <method> <payload> <key>"]

    def test_three_tokens_are_free_form(self, small_grammar: CommandGrammar) -> None:
        assert suggest("context join x", small_grammar) == []

    def test_no_match(self, small_grammar: CommandGrammar) -> None:
        assert suggest("xyz", small_grammar) == []

    @pytest.mark.parametrize("text", ["co", "context j", "/c", "", "call "])
    def test_deterministic(self, small_grammar: CommandGrammar, text: str) -> None:
        assert suggest(text, small_grammar) == suggest(text, small_grammar)
