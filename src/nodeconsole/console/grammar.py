"""Command grammar for operator input.

A grammar is an ordered table of top-level command names, each with the
ordered subcommand (or parameter placeholder) tokens it accepts. The
``suggest`` function turns partially typed input into candidates.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from nodeconsole.domain.models import Suggestion, SuggestionLevel


class CommandGrammar:
    """Immutable, ordered command table.

    An empty subcommand tuple means the command takes free-form
    parameters and offers no second-token completion.
    """

    def __init__(self, commands: Mapping[str, Iterable[str]]) -> None:
        self._commands: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {name: tuple(subcommands) for name, subcommands in commands.items()}
        )

    @property
    def commands(self) -> tuple[str, ...]:
        return tuple(self._commands)

    def subcommands(self, command: str) -> tuple[str, ...] | None:
        """Subcommands of ``command`` matched case-insensitively, or None if unknown."""
        lowered = command.lower()
        for name, subcommands in self._commands.items():
            if name.lower() == lowered:
                return subcommands
        return None

    def label(self, command: str) -> str:
        """Display form of a command, e.g. ``context [ls|join|leave]``."""
        subcommands = self._commands[command]
        if not subcommands:
            return command
        return f"{command} [{'|'.join(subcommands)}]"

    def __contains__(self, command: object) -> bool:
        return isinstance(command, str) and self.subcommands(command) is not None

    def __len__(self) -> int:
        return len(self._commands)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandGrammar):
            return NotImplemented
        return list(self._commands.items()) == list(other._commands.items())

    def __repr__(self) -> str:
        return f"CommandGrammar({dict(self._commands)!r})"


def strip_marker(text: str, marker: str = "/") -> str:
    """Remove one leading directive marker, if present."""
    if marker and text.startswith(marker):
        return text[len(marker):]
    return text


def suggest(text: str, grammar: CommandGrammar, marker: str = "/") -> list[Suggestion]:
    """Compute completion candidates for ``text``.

    One token completes command names, two tokens complete the resolved
    command's subcommands, anything longer is free-form and yields nothing.
    The result depends only on the arguments.
    """
    body = strip_marker(text, marker)
    if not body:
        return []
    if " " not in body:
        prefix = body.lower()
        return [
            Suggestion(label=grammar.label(name), value=name, level=SuggestionLevel.COMMAND)
            for name in grammar.commands
            if name.lower().startswith(prefix)
        ]

    command, rest = body.split(" ", 1)
    if " " in rest:
        return []

    subcommands = grammar.subcommands(command)
    if not subcommands:
        return []
    prefix = rest.lower()
    return [
        Suggestion(label=sub, value=sub, level=SuggestionLevel.SUBCOMMAND)
        for sub in subcommands
        if sub.lower().startswith(prefix)
    ]
