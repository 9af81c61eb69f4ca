"""Built-in template plugins."""

from __future__ import annotations

import random
import re
from collections.abc import Callable, Sequence
from typing import Optional, Protocol

from factbot.formatter.pipeline import FormatContext, TemplatePipeline

_CHOICE_RE = re.compile(r"\{(?P<body>[^{}]*\|[^{}]*)\}")
_IDENTIFIER_RE = re.compile(r"\$(?P<name>nick|who|chan|date|time|me)\b")


class SupportsChoice(Protocol):
    """Minimal RNG protocol for selecting a random variant."""

    def choice(self, seq: Sequence[str]) -> str:
        """Pick one element from a non-empty sequence."""


class ChoicePlugin:
    """Replaces ``{a|b|c}`` with one of its alternatives.

    Groups cannot nest. Alternatives are trimmed; an empty alternative is
    allowed, so ``{!|}`` means "maybe an exclamation mark".
    """

    def __init__(self, rng: Optional[SupportsChoice] = None) -> None:
        self.rng = rng or random

    def expand(self, text: str, context: FormatContext) -> str:
        return _CHOICE_RE.sub(self._choose, text)

    def _choose(self, match: re.Match[str]) -> str:
        parts = [part.strip() for part in match.group("body").split("|")]
        return self.rng.choice(parts)


class IdentifierPlugin:
    """Substitutes ``$nick``/``$who``, ``$chan``, ``$date``, ``$time`` and ``$me``.

    All identifiers are replaced in one regex pass, so a nick that itself
    looks like ``$chan`` is inserted verbatim.
    """

    _RESOLVERS: dict[str, Callable[[FormatContext], str]] = {
        "nick": lambda ctx: ctx.nick,
        "who": lambda ctx: ctx.nick,
        "chan": lambda ctx: ctx.channel,
        "date": lambda ctx: ctx.now.strftime("%Y-%m-%d"),
        "time": lambda ctx: ctx.now.strftime("%H:%M:%S"),
        "me": lambda ctx: ctx.bot_nick,
    }

    def expand(self, text: str, context: FormatContext) -> str:
        return _IDENTIFIER_RE.sub(
            lambda match: self._RESOLVERS[match.group("name")](context), text
        )


def default_pipeline(rng: Optional[SupportsChoice] = None) -> TemplatePipeline:
    """Build the pipeline used for factoid lookups.

    Choices are resolved before identifiers so an alternative may contain
    ``$nick``.
    """
    return TemplatePipeline([ChoicePlugin(rng), IdentifierPlugin()])
