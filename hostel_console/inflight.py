"""Latest-request-wins tracking and timeout racing for API calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from .errors import StaleResultError, TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIMEOUT_MESSAGE = "Request timed out. Server is responding slowly."


class InflightTracker:
    """Marks older in-flight requests of a kind as stale when a new one starts.

    The superseded call still runs to completion; only its result is dropped.
    """

    def __init__(self) -> None:
        self._generations: dict[str, int] = {}

    def begin(self, kind: str) -> int:
        generation = self._generations.get(kind, 0) + 1
        self._generations[kind] = generation
        return generation

    def is_current(self, kind: str, generation: int) -> bool:
        return self._generations.get(kind) == generation

    async def run(self, kind: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Await ``factory()`` and raise StaleResultError if it was superseded."""
        generation = self.begin(kind)
        result = await factory()
        if not self.is_current(kind, generation):
            logger.debug("discarding stale %s result (gen %d)", kind, generation)
            raise StaleResultError(kind)
        return result


async def with_timeout(awaitable: Awaitable[T], timeout_s: float) -> T:
    """Race ``awaitable`` against a timer; expiry becomes a TransientError."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except asyncio.TimeoutError as e:
        raise TransientError(TIMEOUT_MESSAGE) from e


__all__ = ["InflightTracker", "with_timeout", "TIMEOUT_MESSAGE"]
