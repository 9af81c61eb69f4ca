"""Factoid storage and retrieval using SQLite."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol

import aiosqlite

from factbot.db.connection import DatabaseNotConnectedError
from factbot.kb.factoid import Factoid

if TYPE_CHECKING:
    from factbot.db.connection import DatabaseConnection

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, key, value, kind, chance, "
    "created_nick, created_ident, created_host, created_chan, created_at, "
    "modified_nick, modified_ident, modified_host, modified_chan, modified_at, "
    "accessed_nick, accessed_ident, accessed_host, accessed_chan, accessed_at, "
    "access_count"
)


class StoreError(Exception):
    """Base class for factoid storage failures."""


class StoreUnavailableError(StoreError):
    """Raised when the backing database cannot serve a request."""


class FactoidNotFoundError(StoreError, LookupError):
    """Raised when no factoid exists with the requested id."""

    def __init__(self, factoid_id: int) -> None:
        super().__init__(f"No factoid with id {factoid_id}")
        self.factoid_id = factoid_id


class SupportsFactoidStorage(Protocol):
    """Persistence operations the command handlers depend on."""

    async def insert(self, factoid: Factoid) -> int: ...

    async def update_by_id(self, factoid_id: int, factoid: Factoid) -> None: ...

    async def delete_by_id(self, factoid_id: int) -> None: ...

    async def get_by_id(self, factoid_id: int) -> Factoid: ...

    async def count_by_key(self, key: str) -> int: ...

    def find_by_key(self, key: str) -> AsyncIterator[Factoid]: ...


class FactoidStore:
    """SQLite-backed factoid storage.

    Every database failure is re-raised as ``StoreUnavailableError`` so the
    command layer can report it instead of crashing. Updates are plain
    read-modify-write by id: two writers racing on one factoid may lose an
    update (last write wins).

    Attributes:
        db: Database connection to use for queries.
    """

    def __init__(self, db: "DatabaseConnection") -> None:
        """Initialize factoid store.

        Args:
            db: Database connection to use.
        """
        self.db = db

    async def _execute(
        self, sql: str, parameters: tuple | dict = ()
    ) -> aiosqlite.Cursor:
        try:
            return await self.db.execute(sql, parameters)
        except (aiosqlite.Error, DatabaseNotConnectedError) as e:
            raise StoreUnavailableError(f"Factoid database unavailable: {e}") from e

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except (aiosqlite.Error, DatabaseNotConnectedError) as e:
            raise StoreUnavailableError(f"Factoid database unavailable: {e}") from e

    async def insert(self, factoid: Factoid) -> int:
        """Store a new factoid.

        Args:
            factoid: Factoid to insert. Its ``id`` is ignored and overwritten.

        Returns:
            The identifier assigned to the factoid.
        """
        # Unset columns fall back to their schema defaults.
        data = {k: v for k, v in factoid.to_dict().items() if v is not None}
        columns = ", ".join(data)
        placeholders = ", ".join(f":{name}" for name in data)
        cursor = await self._execute(
            f"INSERT INTO factoids ({columns}) VALUES ({placeholders})", data
        )
        await self._commit()

        factoid.id = cursor.lastrowid
        logger.info(f"Inserted factoid {factoid.id}: {factoid.key}")
        return factoid.id

    async def update_by_id(self, factoid_id: int, factoid: Factoid) -> None:
        """Overwrite the stored factoid with the given id.

        Raises:
            FactoidNotFoundError: If no factoid has that id.
        """
        # Creation provenance is immutable once stored.
        data = {
            k: v for k, v in factoid.to_dict().items() if not k.startswith("created_")
        }
        assignments = ", ".join(f"{name} = :{name}" for name in data)
        cursor = await self._execute(
            f"UPDATE factoids SET {assignments} WHERE id = :id",
            {**data, "id": factoid_id},
        )
        await self._commit()

        if cursor.rowcount == 0:
            raise FactoidNotFoundError(factoid_id)
        logger.info(f"Updated factoid {factoid_id}: {factoid.key}")

    async def delete_by_id(self, factoid_id: int) -> None:
        """Delete the factoid with the given id.

        Raises:
            FactoidNotFoundError: If no factoid has that id.
        """
        cursor = await self._execute(
            "DELETE FROM factoids WHERE id = ?", (factoid_id,)
        )
        await self._commit()

        if cursor.rowcount == 0:
            logger.warning(f"Factoid not found for deletion: {factoid_id}")
            raise FactoidNotFoundError(factoid_id)
        logger.info(f"Deleted factoid {factoid_id}")

    async def get_by_id(self, factoid_id: int) -> Factoid:
        """Fetch one factoid by id.

        Raises:
            FactoidNotFoundError: If no factoid has that id.
        """
        cursor = await self._execute(
            f"SELECT {_COLUMNS} FROM factoids WHERE id = ?", (factoid_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            raise FactoidNotFoundError(factoid_id)
        return Factoid.from_dict(dict(row))

    async def count_by_key(self, key: str) -> int:
        """Count the factoids stored under a key."""
        cursor = await self._execute(
            "SELECT COUNT(*) FROM factoids WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def find_by_key(self, key: str) -> AsyncIterator[Factoid]:
        """Yield every factoid stored under a key.

        Each call runs a fresh query, so the sequence can be restarted by
        calling again. Ordering is unspecified.
        """
        cursor = await self._execute(
            f"SELECT {_COLUMNS} FROM factoids WHERE key = ?", (key,)
        )
        try:
            async for row in cursor:
                yield Factoid.from_dict(dict(row))
        except aiosqlite.Error as e:
            raise StoreUnavailableError(f"Factoid database unavailable: {e}") from e
        finally:
            await cursor.close()

    async def count(self) -> int:
        """Get total number of factoids.

        Returns:
            Total factoid count.
        """
        cursor = await self._execute("SELECT COUNT(*) FROM factoids")
        row = await cursor.fetchone()
        return row[0] if row else 0
