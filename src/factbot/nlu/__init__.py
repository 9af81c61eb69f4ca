"""Chat text understanding: key normalization and command classification."""

from factbot.nlu.chance import parse_chance
from factbot.nlu.commands import classify_command
from factbot.nlu.intents import CommandKind, ParsedCommand
from factbot.nlu.keys import normalize_key, strip_self_name

__all__ = [
    "CommandKind",
    "ParsedCommand",
    "classify_command",
    "normalize_key",
    "parse_chance",
    "strip_self_name",
]
