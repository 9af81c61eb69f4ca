"""Discord transport for factbot using discord.py."""

from __future__ import annotations

import logging
import re

import discord

from factbot.config import Config
from factbot.db import DatabaseConnection, initialize_schema
from factbot.events import ChatMessage, MessageKind, Reply
from factbot.flood import OutboundThrottle
from factbot.kb import FactoidStore
from factbot.message_handler import MessageHandler

logger = logging.getLogger(__name__)

DISCORD_MESSAGE_LIMIT = 2000

# Discord renders "/me" as _text_; *text* is accepted too, **bold** is not.
_ACTION_RE = re.compile(
    r"^(?:_(?!_)(?P<underscore>.+?)(?<!_)_|\*(?!\*)(?P<star>.+?)(?<!\*)\*)$",
    re.DOTALL,
)


def build_chat_message(
    message: discord.Message,
    bot_user: discord.abc.User | None,
    nick: str,
) -> ChatMessage:
    """Convert a Discord message into a chat event.

    A message is addressed to the bot when it is a DM, mentions the bot, or
    starts with "<nick>:" / "<nick>,". Mentions and the nick prefix are
    removed from the text.

    Args:
        message: Discord message.
        bot_user: The bot's own user, once logged in.
        nick: The bot's nick.

    Returns:
        The chat event for the message handler.
    """
    content = message.content.strip()
    private = message.guild is None
    addressed = private

    if bot_user is not None:
        mention_pattern = re.compile(rf"<@!?{bot_user.id}>")
        if mention_pattern.search(content):
            addressed = True
            content = mention_pattern.sub("", content).strip().lstrip(" ,:;")

    if nick:
        prefix = re.match(rf"{re.escape(nick)}\s*[:,]\s*", content, re.IGNORECASE)
        if prefix:
            addressed = True
            content = content[prefix.end() :]

    kind = MessageKind.STATEMENT
    action = _ACTION_RE.match(content)
    if action:
        kind = MessageKind.ACTION
        content = (action.group("underscore") or action.group("star")).strip()

    author = message.author
    if private:
        scope_name = f"@{author.name}"
    else:
        scope_name = f"#{getattr(message.channel, 'name', message.channel.id)}"

    return ChatMessage(
        text=content,
        nick=getattr(author, "display_name", str(author)),
        scope=str(message.channel.id),
        ident=author.name,
        host=str(author.id),
        scope_name=scope_name,
        kind=kind,
        addressed=addressed,
        private=private,
    )


def render_reply(reply: Reply) -> list[str]:
    """Render a reply as Discord message chunks.

    Actions are shown in italics. Text over Discord's length limit is split.
    """
    text = reply.text
    if reply.kind is MessageKind.ACTION:
        text = f"_{text}_"
    return [
        text[i : i + DISCORD_MESSAGE_LIMIT]
        for i in range(0, len(text), DISCORD_MESSAGE_LIMIT)
    ]


class FactbotClient(discord.Client):
    """Discord client that feeds every channel message to the factoid handler.

    Also acts as the handler's transport: it sends replies back to the
    originating channel through a per-channel flood throttle.
    """

    def __init__(self, config: Config) -> None:
        """Initialize the Discord client with configuration.

        Args:
            config: Application configuration.
        """
        intents = discord.Intents.default()
        intents.message_content = True
        intents.dm_messages = True
        intents.guild_messages = True

        super().__init__(
            intents=intents,
            # Factoids are user-written; never let them ping anyone.
            allowed_mentions=discord.AllowedMentions.none(),
        )

        self.config = config
        self.db: DatabaseConnection | None = None
        self.message_handler: MessageHandler | None = None
        self.throttle = OutboundThrottle(config.flood_interval_seconds)
        self._channels: dict[str, discord.abc.Messageable] = {}

    async def setup_hook(self) -> None:
        """Open the database and build the message handler before connecting."""
        try:
            self.db = DatabaseConnection(self.config.database_path)
            await self.db.connect()
            await initialize_schema(self.db)
            logger.info("Database initialized successfully")

            nick = self.config.bot_nick or (self.user.name if self.user else "")
            self.message_handler = MessageHandler(
                FactoidStore(self.db),
                self,
                nick=nick,
                literal_public_limit=self.config.literal_public_limit,
            )
            logger.info("Message handler initialized")

        except Exception as e:
            logger.error(f"Failed to initialize bot services: {e}")
            raise

    async def close(self) -> None:
        """Clean up resources before shutting down."""
        if self.db is not None:
            await self.db.close()
        await super().close()

    async def on_ready(self) -> None:
        """Called when the bot has successfully connected to Discord."""
        logger.info(f"Bot logged in as {self.user}")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")
        if (
            self.message_handler is not None
            and not self.message_handler.nick
            and self.user is not None
        ):
            self.message_handler.nick = self.user.name

    async def on_message(self, message: discord.Message) -> None:
        """Handle every message the bot can see.

        Args:
            message: The message that was sent.
        """
        if message.author.bot:
            return

        if not message.content or not message.content.strip():
            return

        if self.message_handler is None:
            logger.error("Message handler not initialized")
            return

        chat_message = build_chat_message(
            message, self.user, self.message_handler.nick
        )
        self._channels[chat_message.scope] = message.channel

        try:
            await self.message_handler.handle_message(chat_message)
        except Exception as e:
            logger.error(
                f"Error processing message from {message.author} "
                f"in {chat_message.scope_name}: {e}",
                exc_info=True,
            )
            if chat_message.addressed:
                await self._send_error_response(message)

    async def send(self, reply: Reply) -> None:
        """Send a reply to the channel it belongs to."""
        channel = self._channels.get(reply.scope)
        if channel is None:
            channel = self.get_channel(int(reply.scope))
        if channel is None:
            logger.warning(f"Dropping reply for unknown channel {reply.scope}")
            return

        for chunk in render_reply(reply):
            await self.throttle.wait(reply.scope)
            await channel.send(chunk)

        logger.debug(f"Response sent to {reply.scope}")

    def suspend_flood_control(self, scope: str) -> None:
        self.throttle.suspend(scope)

    def resume_flood_control(self, scope: str) -> None:
        self.throttle.resume(scope)

    async def _send_error_response(self, message: discord.Message) -> None:
        """Send an error response to a message.

        Args:
            message: Original message that caused the error.
        """
        error_msg = (
            "Sorry, something went wrong processing your message. Please try again."
        )
        try:
            await message.reply(error_msg, mention_author=False)
        except discord.DiscordException as e:
            logger.error(f"Failed to send error response: {e}")

    async def run_bot(self) -> None:
        """Start the bot and connect to Discord.

        Uses the Discord token from config.
        """
        await self.start(self.config.discord_bot_token)
