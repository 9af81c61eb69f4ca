"""Shared pytest fixtures for test infrastructure."""

import random
from pathlib import Path

import pytest

from factbot.db.connection import DatabaseConnection
from factbot.db.schema import initialize_schema
from factbot.events import ChatMessage, MessageKind, Reply
from factbot.kb.store import FactoidStore


@pytest.fixture
async def db_conn(tmp_path: Path) -> DatabaseConnection:
    """Provide a connected database with schema initialized.

    This fixture creates a temporary SQLite database for testing,
    initializes the schema, and ensures proper cleanup after tests.

    Args:
        tmp_path: Pytest's temporary directory fixture.

    Yields:
        DatabaseConnection: Connected database instance.
    """
    conn = DatabaseConnection(tmp_path / "test.db")
    await conn.connect()
    await initialize_schema(conn)
    yield conn
    await conn.close()


@pytest.fixture
async def db_conn_uninitialized(tmp_path: Path) -> DatabaseConnection:
    """Provide a connected database WITHOUT schema initialization.

    Useful for testing schema migration and initialization logic.

    Args:
        tmp_path: Pytest's temporary directory fixture.

    Yields:
        DatabaseConnection: Connected database instance without schema.
    """
    conn = DatabaseConnection(tmp_path / "test.db")
    await conn.connect()
    yield conn
    await conn.close()


@pytest.fixture
async def store(db_conn: DatabaseConnection) -> FactoidStore:
    """Provide a factoid store with initialized database.

    Args:
        db_conn: Database connection fixture.

    Returns:
        FactoidStore: Store instance for testing.
    """
    return FactoidStore(db_conn)


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded RNG so selection tests are reproducible."""
    return random.Random(1234)


class FakeTransport:
    """Records everything the handler sends.

    Attributes:
        replies: Replies in the order they were sent.
        events: Replies interleaved with ("suspend", scope) and
            ("resume", scope) markers.
    """

    def __init__(self) -> None:
        self.replies: list[Reply] = []
        self.events: list[object] = []

    async def send(self, reply: Reply) -> None:
        self.replies.append(reply)
        self.events.append(reply)

    def suspend_flood_control(self, scope: str) -> None:
        self.events.append(("suspend", scope))

    def resume_flood_control(self, scope: str) -> None:
        self.events.append(("resume", scope))

    @property
    def texts(self) -> list[str]:
        return [reply.text for reply in self.replies]

    def clear(self) -> None:
        self.replies.clear()
        self.events.clear()


@pytest.fixture
def transport() -> FakeTransport:
    """Provide a transport that records replies instead of sending them."""
    return FakeTransport()


@pytest.fixture
def make_message():
    """Provide a factory for chat messages.

    Example:
        def test_something(make_message):
            msg = make_message("foo := bar", addressed=True)
    """

    def _create_message(
        text: str,
        nick: str = "alice",
        scope: str = "#test",
        addressed: bool = False,
        private: bool = False,
        kind: MessageKind = MessageKind.STATEMENT,
    ) -> ChatMessage:
        return ChatMessage(
            text=text,
            nick=nick,
            scope=scope,
            ident=nick,
            host=f"{nick}.example",
            scope_name=scope,
            kind=kind,
            addressed=addressed,
            private=private,
        )

    return _create_message
