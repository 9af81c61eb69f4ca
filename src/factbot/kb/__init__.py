"""Knowledge base for factoid storage and retrieval."""

from factbot.kb.factoid import Factoid, FactoidKind, Provenance, parse_value
from factbot.kb.selection import FactoidSelector
from factbot.kb.store import (
    FactoidNotFoundError,
    FactoidStore,
    StoreError,
    StoreUnavailableError,
    SupportsFactoidStorage,
)

__all__ = [
    "Factoid",
    "FactoidKind",
    "FactoidNotFoundError",
    "FactoidSelector",
    "FactoidStore",
    "Provenance",
    "StoreError",
    "StoreUnavailableError",
    "SupportsFactoidStorage",
    "parse_value",
]
