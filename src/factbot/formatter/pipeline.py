"""Template expansion for recalled factoid values."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class FormatContext:
    """Chat context available to template plugins.

    Attributes:
        nick: Name of the person whose line triggered the factoid.
        channel: Name of the conversation scope.
        addressed: Whether the triggering line was addressed to the bot.
        now: Time of expansion.
        bot_nick: The bot's own name.
    """

    nick: str
    channel: str
    now: datetime
    addressed: bool = False
    bot_nick: str = ""


class TemplatePlugin(Protocol):
    """Recognizes one family of directives and substitutes them."""

    def expand(self, text: str, context: FormatContext) -> str:
        """Return ``text`` with this plugin's directives replaced.

        Unrecognized directives must be left untouched.
        """


class TemplatePipeline:
    """Runs registered plugins over a value, in registration order.

    Each plugin sees the text once. The pipeline makes a single pass and
    never feeds its output back in, which bounds the size of the result.
    """

    def __init__(self, plugins: Iterable[TemplatePlugin] = ()) -> None:
        self._plugins: list[TemplatePlugin] = list(plugins)

    def register(self, plugin: TemplatePlugin) -> None:
        """Append a plugin; it runs after all previously registered ones."""
        self._plugins.append(plugin)

    @property
    def plugins(self) -> tuple[TemplatePlugin, ...]:
        return tuple(self._plugins)

    def expand(self, text: str, context: FormatContext) -> str:
        """Expand every directive in ``text``.

        Args:
            text: Raw factoid value.
            context: Chat context of the recall.

        Returns:
            Text ready to send.
        """
        for plugin in self._plugins:
            text = plugin.expand(text, context)
        return text
