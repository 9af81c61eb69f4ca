"""Tests for database connection management."""

from pathlib import Path

import pytest

from factbot.db.connection import DatabaseConnection, DatabaseNotConnectedError


@pytest.fixture
async def db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path."""
    return tmp_path / "test.db"


async def test_connection_initialization(db_path: Path):
    """Test database connection can be initialized."""
    conn = DatabaseConnection(db_path, timeout=2.5)
    assert not conn.is_connected
    assert conn.db_path == db_path
    assert conn.timeout == 2.5


async def test_connect_creates_database_file(db_path: Path):
    """Test connect() creates the database file and parent directories."""
    nested_path = db_path.parent / "nested" / "test.db"
    conn = DatabaseConnection(nested_path)

    assert not nested_path.exists()

    await conn.connect()

    assert nested_path.exists()
    assert conn.is_connected

    await conn.close()


async def test_wal_mode_enabled(db_conn_uninitialized: DatabaseConnection):
    """Test that WAL mode is enabled."""
    cursor = await db_conn_uninitialized.execute("PRAGMA journal_mode")
    row = await cursor.fetchone()
    assert row[0].upper() == "WAL"


async def test_rows_addressable_by_column_name(
    db_conn_uninitialized: DatabaseConnection,
):
    """Rows come back as aiosqlite.Row so columns can be read by name."""
    cursor = await db_conn_uninitialized.execute("SELECT 1 + 1 AS total")
    row = await cursor.fetchone()
    assert row["total"] == 2
    assert dict(row) == {"total": 2}


async def test_execute_with_named_parameters(
    db_conn_uninitialized: DatabaseConnection,
):
    """Test executing a query with a parameter mapping."""
    await db_conn_uninitialized.execute(
        "CREATE TABLE test_table (id INTEGER PRIMARY KEY, value TEXT)"
    )
    await db_conn_uninitialized.execute(
        "INSERT INTO test_table (id, value) VALUES (:id, :value)",
        {"id": 1, "value": "test"},
    )
    await db_conn_uninitialized.commit()

    cursor = await db_conn_uninitialized.execute(
        "SELECT value FROM test_table WHERE id = ?", (1,)
    )
    row = await cursor.fetchone()
    assert row[0] == "test"


async def test_commit_and_rollback(db_conn_uninitialized: DatabaseConnection):
    """Test commit and rollback functionality."""
    await db_conn_uninitialized.execute(
        "CREATE TABLE test_table (id INTEGER PRIMARY KEY, value TEXT)"
    )
    await db_conn_uninitialized.commit()

    await db_conn_uninitialized.execute(
        "INSERT INTO test_table (id, value) VALUES (?, ?)", (1, "committed")
    )
    await db_conn_uninitialized.commit()

    await db_conn_uninitialized.execute(
        "INSERT INTO test_table (id, value) VALUES (?, ?)", (2, "rolled_back")
    )
    await db_conn_uninitialized.rollback()

    cursor = await db_conn_uninitialized.execute("SELECT value FROM test_table")
    rows = await cursor.fetchall()
    assert [row[0] for row in rows] == ["committed"]


async def test_execute_without_connection_raises_error(db_path: Path):
    """Queries before connect() raise DatabaseNotConnectedError."""
    conn = DatabaseConnection(db_path)

    with pytest.raises(DatabaseNotConnectedError, match="not established"):
        await conn.execute("SELECT 1")


async def test_not_connected_error_is_runtime_error(db_path: Path):
    """Callers that only know RuntimeError still catch it."""
    conn = DatabaseConnection(db_path)

    with pytest.raises(RuntimeError):
        await conn.commit()


async def test_execute_after_close_raises_error(
    db_conn_uninitialized: DatabaseConnection,
):
    """Test that a closed connection refuses queries."""
    await db_conn_uninitialized.close()

    with pytest.raises(DatabaseNotConnectedError):
        await db_conn_uninitialized.execute("SELECT 1")


async def test_close_idempotent(db_conn_uninitialized: DatabaseConnection):
    """Test that close() can be called multiple times safely."""
    await db_conn_uninitialized.close()
    assert not db_conn_uninitialized.is_connected

    await db_conn_uninitialized.close()
    assert not db_conn_uninitialized.is_connected


async def test_connect_idempotent(db_conn_uninitialized: DatabaseConnection):
    """Test that connect() can be called multiple times safely."""
    assert db_conn_uninitialized.is_connected

    await db_conn_uninitialized.connect()
    assert db_conn_uninitialized.is_connected
