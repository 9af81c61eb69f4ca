"""Factoid data model for factbot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class FactoidKind(str, Enum):
    """How a recalled factoid is emitted."""

    STATEMENT = "statement"  # Sent as a normal message
    ACTION = "action"  # Sent as a first-person "/me" message


# Value prefixes that select the kind when a factoid is taught.
_KIND_TAGS: tuple[tuple[str, FactoidKind], ...] = (
    ("<reply>", FactoidKind.STATEMENT),
    ("<action>", FactoidKind.ACTION),
    ("<me>", FactoidKind.ACTION),
)


@dataclass(frozen=True)
class Provenance:
    """Who touched a factoid, from where, and when.

    Attributes:
        nick: Display name of the speaker.
        ident: Account name of the speaker.
        host: Stable identifier of the speaker (e.g. a Discord user id).
        channel: Conversation scope the speaker was in.
        timestamp: When the touch happened (UTC).
    """

    nick: str
    ident: str = ""
    host: str = ""
    channel: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_columns(self, prefix: str) -> dict:
        """Flatten into ``<prefix>_nick``-style storage columns."""
        return {
            f"{prefix}_nick": self.nick,
            f"{prefix}_ident": self.ident,
            f"{prefix}_host": self.host,
            f"{prefix}_chan": self.channel,
            f"{prefix}_at": self.timestamp.isoformat(),
        }

    @classmethod
    def from_columns(cls, data: dict, prefix: str) -> Provenance | None:
        """Rebuild from storage columns, or None if the slot was never set."""
        stamp = data.get(f"{prefix}_at")
        if not stamp:
            return None
        return cls(
            nick=data.get(f"{prefix}_nick") or "",
            ident=data.get(f"{prefix}_ident") or "",
            host=data.get(f"{prefix}_host") or "",
            channel=data.get(f"{prefix}_chan") or "",
            timestamp=datetime.fromisoformat(stamp),
        )


def parse_value(value: str) -> tuple[FactoidKind, str]:
    """Split a taught value into its kind and display text.

    ``<reply>text`` is a plain statement, ``<action>text`` and ``<me>text``
    are actions. Anything else is a statement kept as-is.

    Args:
        value: Raw value as typed by the user.

    Returns:
        Tuple of (kind, value with the tag removed).
    """
    stripped = value.strip()
    lowered = stripped.lower()
    for tag, kind in _KIND_TAGS:
        if lowered.startswith(tag):
            return kind, stripped[len(tag) :].strip()
    return FactoidKind.STATEMENT, stripped


@dataclass
class Factoid:
    """A single key/value knowledge unit.

    Many factoids may share the same key; each one is addressed by its
    storage ``id``. A factoid matched by a lookup is only emitted with
    probability ``chance``.

    Attributes:
        key: Normalized lookup key.
        value: Display text, may contain template directives.
        kind: Whether the value is said or acted.
        chance: Recall probability in (0.0, 1.0].
        id: Storage identifier, None until inserted.
        created: Provenance of the creation.
        modified: Provenance of the last value/chance edit.
        accessed: Provenance of the last successful recall.
        access_count: Number of successful recalls.
    """

    key: str
    value: str
    kind: FactoidKind = FactoidKind.STATEMENT
    chance: float = 1.0
    id: int | None = None
    created: Provenance | None = None
    modified: Provenance | None = None
    accessed: Provenance | None = None
    access_count: int = 0

    def __post_init__(self) -> None:
        """Validate factoid data."""
        if not self.key or not self.key.strip():
            raise ValueError("Factoid key cannot be empty")
        if not self.value or not self.value.strip():
            raise ValueError("Factoid value cannot be empty")
        if not 0.0 < self.chance <= 1.0:
            raise ValueError(f"Factoid chance must be in (0, 1], got {self.chance}")

        self.key = self.key.strip()
        self.value = self.value.strip()

        if isinstance(self.kind, str):
            self.kind = FactoidKind(self.kind.lower())

    @classmethod
    def new(cls, key: str, value: str, provenance: Provenance) -> Factoid:
        """Create a factoid from user input, honouring kind tags in the value."""
        kind, text = parse_value(value)
        return cls(
            key=key,
            value=text,
            kind=kind,
            created=provenance,
            modified=provenance,
        )

    def modify(self, provenance: Provenance) -> None:
        """Record an edit of the value or chance."""
        self.modified = provenance

    def access(self, provenance: Provenance) -> None:
        """Record a successful recall."""
        self.accessed = provenance
        self.access_count += 1

    def to_dict(self) -> dict:
        """Convert factoid to a flat dictionary suitable for database storage.

        Returns:
            Column name to value mapping (``id`` excluded).
        """
        data = {
            "key": self.key,
            "value": self.value,
            "kind": self.kind.value,
            "chance": self.chance,
            "access_count": self.access_count,
        }
        for prefix, provenance in (
            ("created", self.created),
            ("modified", self.modified),
            ("accessed", self.accessed),
        ):
            if provenance is not None:
                data.update(provenance.to_columns(prefix))
            else:
                data.update(
                    {
                        f"{prefix}_nick": None,
                        f"{prefix}_ident": None,
                        f"{prefix}_host": None,
                        f"{prefix}_chan": None,
                        f"{prefix}_at": None,
                    }
                )
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Factoid:
        """Create factoid from a database row mapping.

        Args:
            data: Column name to value mapping, including ``id``.

        Returns:
            Factoid instance.
        """
        return cls(
            id=data.get("id"),
            key=data["key"],
            value=data["value"],
            kind=FactoidKind(data["kind"]),
            chance=float(data["chance"]),
            created=Provenance.from_columns(data, "created"),
            modified=Provenance.from_columns(data, "modified"),
            accessed=Provenance.from_columns(data, "accessed"),
            access_count=int(data.get("access_count") or 0),
        )
