"""Tests for database schema management."""

import aiosqlite
import pytest

from factbot.db.connection import DatabaseConnection
from factbot.db.schema import SCHEMA_VERSION, initialize_schema, reset_schema


async def test_initialize_schema_creates_tables(
    db_conn_uninitialized: DatabaseConnection,
):
    """Test that initialize_schema creates required tables."""
    await initialize_schema(db_conn_uninitialized)

    cursor = await db_conn_uninitialized.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    names = {row[0] for row in await cursor.fetchall()}
    assert {"factoids", "schema_version"} <= names


async def test_initialize_schema_sets_version(
    db_conn_uninitialized: DatabaseConnection,
):
    """Test that initialize_schema sets the correct schema version."""
    await initialize_schema(db_conn_uninitialized)

    cursor = await db_conn_uninitialized.execute(
        "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
    )
    row = await cursor.fetchone()
    assert row is not None
    assert row[0] == SCHEMA_VERSION


async def test_initialize_schema_idempotent(db_conn_uninitialized: DatabaseConnection):
    """Test that initialize_schema can be called multiple times."""
    await initialize_schema(db_conn_uninitialized)
    await initialize_schema(db_conn_uninitialized)

    cursor = await db_conn_uninitialized.execute("SELECT COUNT(*) FROM schema_version")
    row = await cursor.fetchone()
    assert row[0] == 1


async def test_factoids_table_structure(db_conn_uninitialized: DatabaseConnection):
    """Test that factoids table has correct structure."""
    await initialize_schema(db_conn_uninitialized)

    cursor = await db_conn_uninitialized.execute("PRAGMA table_info(factoids)")
    columns = await cursor.fetchall()
    col_dict = {col[1]: col[2] for col in columns}

    assert col_dict["id"] == "INTEGER"
    assert col_dict["key"] == "TEXT"
    assert col_dict["value"] == "TEXT"
    assert col_dict["kind"] == "TEXT"
    assert col_dict["chance"] == "REAL"
    assert col_dict["access_count"] == "INTEGER"
    for prefix in ("created", "modified", "accessed"):
        for suffix in ("nick", "ident", "host", "chan", "at"):
            assert col_dict[f"{prefix}_{suffix}"] == "TEXT"


async def test_factoids_defaults(db_conn: DatabaseConnection):
    """A bare key/value row gets statement kind, full chance and a timestamp."""
    await db_conn.execute(
        "INSERT INTO factoids (key, value) VALUES (?, ?)", ("foo", "bar")
    )
    await db_conn.commit()

    cursor = await db_conn.execute(
        "SELECT kind, chance, access_count, created_at FROM factoids"
    )
    row = await cursor.fetchone()
    assert row["kind"] == "statement"
    assert row["chance"] == 1.0
    assert row["access_count"] == 0
    assert row["created_at"]


async def test_keys_are_not_unique(db_conn: DatabaseConnection):
    """One key may carry any number of values, duplicates included."""
    for _ in range(3):
        await db_conn.execute(
            "INSERT INTO factoids (key, value) VALUES (?, ?)", ("foo", "bar")
        )
    await db_conn.commit()

    cursor = await db_conn.execute("SELECT COUNT(*) FROM factoids WHERE key = 'foo'")
    row = await cursor.fetchone()
    assert row[0] == 3


async def test_kind_constraint(db_conn: DatabaseConnection):
    """Test that factoids table enforces the kind constraint."""
    await db_conn.execute(
        "INSERT INTO factoids (key, value, kind) VALUES (?, ?, ?)",
        ("a", "b", "action"),
    )
    await db_conn.commit()

    with pytest.raises(aiosqlite.IntegrityError):
        await db_conn.execute(
            "INSERT INTO factoids (key, value, kind) VALUES (?, ?, ?)",
            ("a", "b", "is"),
        )


@pytest.mark.parametrize("chance", [0.0, -0.5, 1.5])
async def test_chance_constraint(db_conn: DatabaseConnection, chance: float):
    """Chances outside (0, 1] are rejected by the database."""
    with pytest.raises(aiosqlite.IntegrityError):
        await db_conn.execute(
            "INSERT INTO factoids (key, value, chance) VALUES (?, ?, ?)",
            ("a", "b", chance),
        )


async def test_factoids_index_created(db_conn_uninitialized: DatabaseConnection):
    """Test that index on factoids key is created."""
    await initialize_schema(db_conn_uninitialized)

    cursor = await db_conn_uninitialized.execute(
        "SELECT name FROM sqlite_master WHERE type='index' AND name='idx_factoids_key'"
    )
    row = await cursor.fetchone()
    assert row is not None
    assert row[0] == "idx_factoids_key"


async def test_reset_schema_drops_and_recreates(
    db_conn_uninitialized: DatabaseConnection,
):
    """Test that reset_schema drops existing data and recreates schema."""
    await initialize_schema(db_conn_uninitialized)

    await db_conn_uninitialized.execute(
        "INSERT INTO factoids (key, value) VALUES (?, ?)", ("test", "value")
    )
    await db_conn_uninitialized.commit()

    cursor = await db_conn_uninitialized.execute("SELECT COUNT(*) FROM factoids")
    row = await cursor.fetchone()
    assert row[0] == 1

    await reset_schema(db_conn_uninitialized)

    cursor = await db_conn_uninitialized.execute("SELECT COUNT(*) FROM factoids")
    row = await cursor.fetchone()
    assert row[0] == 0

    cursor = await db_conn_uninitialized.execute("SELECT COUNT(*) FROM schema_version")
    row = await cursor.fetchone()
    assert row[0] == 1
