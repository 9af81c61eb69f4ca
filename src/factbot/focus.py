"""Per-conversation memory of the last factoid the bot touched."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class FocusState:
    """Remembers one factoid id per conversation scope.

    "that" in a follow-up command ("forget that", "replace that with ...")
    refers to the focused factoid of the scope the command was said in.
    Each scope has its own slot, so a channel never acts on a factoid that
    was recalled somewhere else. Only the latest id is kept.
    """

    def __init__(self) -> None:
        self._focus: dict[str, int] = {}

    def set(self, scope: str, factoid_id: int) -> None:
        """Focus a factoid in a scope, replacing any previous focus."""
        self._focus[scope] = factoid_id
        logger.debug(f"Focus in {scope} is now factoid {factoid_id}")

    def get(self, scope: str) -> int | None:
        """Return the focused factoid id of a scope, if any."""
        return self._focus.get(scope)

    def clear(self, scope: str) -> None:
        """Forget the focus of a scope."""
        self._focus.pop(scope, None)

    def __contains__(self, scope: object) -> bool:
        return scope in self._focus

    def __len__(self) -> int:
        return len(self._focus)
