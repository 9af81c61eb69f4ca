"""Pseudo-random factoid selection with per-factoid recall chance."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Optional, Protocol

from factbot.kb.factoid import Factoid
from factbot.kb.store import SupportsFactoidStorage

logger = logging.getLogger(__name__)


class SupportsRandom(Protocol):
    """Minimal RNG protocol used for selection and the chance gate."""

    def choice(self, seq: Sequence[Factoid]) -> Factoid:
        """Pick one element from a non-empty sequence."""

    def random(self) -> float:
        """Return a float in [0.0, 1.0)."""


class FactoidSelector:
    """Chooses which factoid, if any, answers a key.

    All factoids sharing a key are equally likely to be picked; ``chance``
    only decides whether the picked one is actually emitted. This keeps
    frequently triggered keys (smilies, "lol") from flooding a channel.
    """

    def __init__(
        self,
        store: SupportsFactoidStorage,
        rng: Optional[SupportsRandom] = None,
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()

    async def pick(self, key: str) -> Factoid | None:
        """Pick one factoid for the key uniformly at random.

        Returns:
            The picked factoid, or None if nothing is stored under the key.
        """
        if not key:
            return None

        candidates = [factoid async for factoid in self.store.find_by_key(key)]
        if not candidates:
            logger.debug(f"No factoids for key '{key}'")
            return None

        return self.rng.choice(candidates)

    def passes_chance(self, factoid: Factoid) -> bool:
        """Apply the factoid's recall probability."""
        return self.rng.random() < factoid.chance

    async def recall(self, key: str) -> Factoid | None:
        """Pick a factoid for the key and apply its chance gate.

        Returns:
            The factoid to emit, or None when nothing matched or the match
            was suppressed by its chance.
        """
        factoid = await self.pick(key)
        if factoid is None:
            return None
        if not self.passes_chance(factoid):
            logger.debug(f"Factoid {factoid.id} suppressed by chance {factoid.chance}")
            return None
        return factoid
