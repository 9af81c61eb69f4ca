"""Command data models produced by the classifier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommandKind(Enum):
    """What an addressed line asks the bot to do."""

    ADD = "add"
    DELETE = "delete"
    REPLACE = "replace"
    SET_CHANCE = "set_chance"
    LITERAL = "literal"
    LOOKUP = "lookup"


@dataclass(frozen=True)
class ParsedCommand:
    """Structured command extracted from a chat line.

    Attributes:
        kind: The command to run.
        text: Original line, whitespace-trimmed.
        argument: Text after the command's literal prefix (the new value for
            REPLACE, the chance for SET_CHANCE, the key for LITERAL). For ADD
            and LOOKUP this is the whole line.
    """

    kind: CommandKind
    text: str
    argument: str
