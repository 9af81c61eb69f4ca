"""Database connection management for factbot.

Provides async SQLite access with WAL mode enabled. Rows come back as
``aiosqlite.Row`` so callers can address columns by name.
"""

import asyncio
import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class DatabaseNotConnectedError(RuntimeError):
    """Raised when a query is issued before connect() or after close()."""


class DatabaseConnection:
    """Manages an async SQLite connection with WAL mode.

    Attributes:
        db_path: Path to the SQLite database file.
        timeout: Seconds a statement waits on a locked database before failing.
    """

    def __init__(
        self, db_path: Path, timeout: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        """Initialize database connection manager.

        Args:
            db_path: Path to SQLite database file.
            timeout: Busy timeout applied to every statement.
        """
        self.db_path = db_path
        self.timeout = timeout
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Open the database, creating parent directories as needed.

        Raises:
            aiosqlite.Error: If connection or WAL mode setup fails.
        """
        async with self._lock:
            if self._conn is not None:
                logger.warning("Connection already established")
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self._conn = await aiosqlite.connect(
                str(self.db_path), timeout=self.timeout
            )
            self._conn.row_factory = aiosqlite.Row

            await self._conn.execute("PRAGMA journal_mode=WAL")
            await self._conn.execute("PRAGMA foreign_keys=ON")

            logger.info(f"Database connected: {self.db_path}")

    async def close(self) -> None:
        """Close database connection if open."""
        async with self._lock:
            if self._conn is not None:
                await self._conn.close()
                self._conn = None
                logger.info("Database connection closed")

    def _require_connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise DatabaseNotConnectedError(
                "Database connection not established. Call connect() first."
            )
        return self._conn

    async def execute(
        self, sql: str, parameters: tuple | dict | None = None
    ) -> aiosqlite.Cursor:
        """Execute a SQL statement.

        Args:
            sql: SQL statement to execute.
            parameters: Optional parameters for the SQL statement.

        Returns:
            Database cursor with results.

        Raises:
            DatabaseNotConnectedError: If connection is not established.
        """
        conn = self._require_connection()
        if parameters is None:
            return await conn.execute(sql)
        return await conn.execute(sql, parameters)

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._require_connection().commit()

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        await self._require_connection().rollback()

    @property
    def is_connected(self) -> bool:
        """Check if database connection is established."""
        return self._conn is not None
