"""Classify addressed chat lines into factoid commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from factbot.nlu.intents import CommandKind, ParsedCommand

# Returns the command argument, or None when the rule does not apply.
_Matcher = Callable[[str, str], "str | None"]


@dataclass(frozen=True)
class _CommandRule:
    kind: CommandKind
    match: _Matcher


def _contains(*needles: str) -> _Matcher:
    def match(text: str, lowered: str) -> str | None:
        if any(needle in lowered for needle in needles):
            return text
        return None

    return match


def _prefix(*prefixes: str) -> _Matcher:
    def match(text: str, lowered: str) -> str | None:
        for prefix in prefixes:
            if lowered.startswith(prefix):
                return text[len(prefix) :].strip()
        return None

    return match


# Checked in order; the first rule that matches wins.
_COMMAND_RULES: tuple[_CommandRule, ...] = (
    _CommandRule(CommandKind.ADD, _contains(":=", ":is")),
    _CommandRule(CommandKind.DELETE, _prefix("forget that", "delete that")),
    _CommandRule(CommandKind.REPLACE, _prefix("replace that with ")),
    _CommandRule(CommandKind.SET_CHANCE, _prefix("chance of that is ")),
    _CommandRule(CommandKind.LITERAL, _prefix("literal ")),
)


def classify_command(text: str) -> ParsedCommand:
    """Classify a line that was addressed to the bot.

    Args:
        text: Message text with the bot mention removed.

    Returns:
        The parsed command. Lines matching no command are lookups.
    """
    stripped = text.strip()
    lowered = stripped.lower()

    for rule in _COMMAND_RULES:
        argument = rule.match(stripped, lowered)
        if argument is not None:
            return ParsedCommand(kind=rule.kind, text=stripped, argument=argument)

    return ParsedCommand(kind=CommandKind.LOOKUP, text=stripped, argument=stripped)


def command_kinds() -> tuple[CommandKind, ...]:
    """Return the classifiable command kinds in priority order."""

    return tuple(rule.kind for rule in _COMMAND_RULES)
