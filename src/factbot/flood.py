"""Outbound flood control for chat transports."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class OutboundThrottle:
    """Keeps a minimum interval between lines sent to the same scope.

    Scopes are throttled independently. A scope can be suspended, e.g. while
    a literal dump is being sent; suspensions nest, and throttling resumes
    once every suspend() has been matched by a resume().

    Attributes:
        interval_seconds: Minimum spacing between two lines in a scope.
    """

    def __init__(
        self,
        interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval_seconds < 0:
            raise ValueError(
                f"interval_seconds must be >= 0 (got {interval_seconds})"
            )
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._next_slot: dict[str, float] = {}
        self._suspended: dict[str, int] = {}

    def suspend(self, scope: str) -> None:
        """Stop throttling a scope until the matching resume()."""
        self._suspended[scope] = self._suspended.get(scope, 0) + 1
        logger.debug(f"Flood control suspended in {scope}")

    def resume(self, scope: str) -> None:
        """Undo one suspend() for a scope."""
        remaining = self._suspended.get(scope, 0) - 1
        if remaining > 0:
            self._suspended[scope] = remaining
        else:
            self._suspended.pop(scope, None)
            logger.debug(f"Flood control resumed in {scope}")

    def is_suspended(self, scope: str) -> bool:
        return scope in self._suspended

    @property
    def tracked_scopes(self) -> int:
        """Number of scopes with throttling state still held."""
        return len(self._next_slot)

    def _prune(self, now: float) -> None:
        # A scope whose next slot has passed would not wait anyway.
        for scope, slot in list(self._next_slot.items()):
            if slot <= now:
                del self._next_slot[scope]

    async def wait(self, scope: str) -> None:
        """Wait until the next line may be sent to a scope.

        The slot is reserved before sleeping, so concurrent senders in one
        scope queue up one interval apart.
        """
        if self.interval_seconds == 0 or self.is_suspended(scope):
            return

        now = self._clock()
        self._prune(now)
        slot = self._next_slot.get(scope, now)
        self._next_slot[scope] = slot + self.interval_seconds
        if slot > now:
            await self._sleep(slot - now)
