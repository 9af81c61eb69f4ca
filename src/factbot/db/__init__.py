"""Database layer for factbot."""

from factbot.db.connection import DatabaseConnection
from factbot.db.schema import initialize_schema, reset_schema

__all__ = ["DatabaseConnection", "initialize_schema", "reset_schema"]
