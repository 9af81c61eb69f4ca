"""Inbound and outbound chat events exchanged with the transport."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from factbot.kb.factoid import Provenance


class MessageKind(str, Enum):
    """Whether a line was said or acted ("/me")."""

    STATEMENT = "statement"
    ACTION = "action"


@dataclass(frozen=True)
class ChatMessage:
    """A chat line delivered to the bot.

    Attributes:
        text: Message text with any bot mention already removed.
        nick: Display name of the speaker.
        scope: Conversation scope identifier (e.g. a channel id).
        ident: Account name of the speaker.
        host: Stable identifier of the speaker.
        scope_name: Human readable scope name, used by ``$chan``.
        kind: Statement or action.
        addressed: True when the line was directed at the bot.
        private: True for one-to-one conversations.
    """

    text: str
    nick: str
    scope: str
    ident: str = ""
    host: str = ""
    scope_name: str = ""
    kind: MessageKind = MessageKind.STATEMENT
    addressed: bool = False
    private: bool = False

    def provenance(self) -> Provenance:
        """Describe the speaker for factoid bookkeeping."""
        return Provenance(
            nick=self.nick,
            ident=self.ident,
            host=self.host,
            channel=self.scope_name or self.scope,
        )


@dataclass(frozen=True)
class Reply:
    """A line the bot sends back to a conversation scope."""

    scope: str
    text: str
    kind: MessageKind = MessageKind.STATEMENT


class Transport(Protocol):
    """What the command handlers need from the chat connection."""

    async def send(self, reply: Reply) -> None:
        """Deliver a reply to its scope."""

    def suspend_flood_control(self, scope: str) -> None:
        """Stop throttling outbound lines in a scope."""

    def resume_flood_control(self, scope: str) -> None:
        """Restore outbound throttling in a scope."""
