"""Configuration management for factbot.

Loads settings from environment variables with sensible defaults.
Supports .env files via python-dotenv.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables."""

    discord_bot_token: str
    database_path: Path
    log_level: str
    bot_nick: str | None = None
    literal_public_limit: int = 10
    flood_interval_seconds: float = 1.0

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file. If None, searches for .env
                     in current directory and parent directories.

        Returns:
            Config instance with values from environment.

        Raises:
            ValueError: If required environment variables are missing or
                any value is invalid.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        discord_token = os.getenv("DISCORD_BOT_TOKEN")
        if not discord_token:
            raise ValueError(
                "DISCORD_BOT_TOKEN environment variable is required. "
                "Get one at https://discord.com/developers/applications"
            )

        database_path = Path(os.getenv("DATABASE_PATH", "data/factbot.db"))
        bot_nick = os.getenv("BOT_NICK", "").strip() or None

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL: {log_level}. Must be one of {VALID_LOG_LEVELS}"
            )

        raw_limit = os.getenv("LITERAL_PUBLIC_LIMIT", "10")
        try:
            literal_public_limit = int(raw_limit)
        except ValueError as e:
            raise ValueError(
                f"LITERAL_PUBLIC_LIMIT must be an integer (got {raw_limit!r})"
            ) from e
        if literal_public_limit < 1:
            raise ValueError(
                f"LITERAL_PUBLIC_LIMIT must be >= 1 (got {literal_public_limit})"
            )

        raw_interval = os.getenv("FLOOD_INTERVAL_SECONDS", "1.0")
        try:
            flood_interval_seconds = float(raw_interval)
        except ValueError as e:
            raise ValueError(
                f"FLOOD_INTERVAL_SECONDS must be a number (got {raw_interval!r})"
            ) from e
        if not 0.0 <= flood_interval_seconds < float("inf"):
            raise ValueError(
                "FLOOD_INTERVAL_SECONDS must be >= 0 "
                f"(got {flood_interval_seconds})"
            )

        return cls(
            discord_bot_token=discord_token,
            database_path=database_path,
            log_level=log_level,
            bot_nick=bot_nick,
            literal_public_limit=literal_public_limit,
            flood_interval_seconds=flood_interval_seconds,
        )
