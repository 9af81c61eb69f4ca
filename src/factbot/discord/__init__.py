"""Discord transport for factbot."""

from factbot.discord.bot import FactbotClient, build_chat_message, render_reply

__all__ = ["FactbotClient", "build_chat_message", "render_reply"]
