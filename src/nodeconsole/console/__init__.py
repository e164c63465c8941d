"""Node session and command console for nodeconsole.

Keeps the registry of node summaries, the live output session of the
selected node, and the autocomplete engine for operator input.

Public API:
    Console -- Facade composing everything below
    SessionController -- Subscription lifecycle and command dispatch
    NodeRegistry -- Cached node list and selection
    OutputLog -- Append-only session output
    AutocompleteEngine -- Suggestion list with keyboard navigation
    CommandGrammar -- Command table
"""

from nodeconsole.console.autocomplete import AutocompleteEngine
from nodeconsole.console.facade import Console
from nodeconsole.console.grammar import CommandGrammar, suggest
from nodeconsole.console.output_log import OutputLog
from nodeconsole.console.registry import NodeRegistry, RegistryRefreshError
from nodeconsole.console.session import SessionController

__all__ = [
    "AutocompleteEngine",
    "CommandGrammar",
    "Console",
    "NodeRegistry",
    "OutputLog",
    "RegistryRefreshError",
    "SessionController",
    "suggest",
]
