"""Time-to-live cache for API reads.

One instance belongs to one console session and is discarded with it.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

from .models.cache import CacheEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_AGE_S = 5 * 60


class TtlCache:
    """Key -> ``CacheEntry`` map where entries older than ``max_age_s`` are absent."""

    def __init__(
        self,
        max_age_s: float = DEFAULT_MAX_AGE_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_age_s = max_age_s
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def _is_valid(self, entry: CacheEntry | None, max_age_s: float | None) -> bool:
        if entry is None:
            return False
        age = self._clock() - entry.stored_at
        return age < (self.max_age_s if max_age_s is None else max_age_s)

    def get(self, key: str, max_age_s: float | None = None) -> Any | None:
        """Return the cached value for ``key`` if still valid, else None."""
        entry = self._entries.get(key)
        if self._is_valid(entry, max_age_s):
            return entry.value
        return None

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    async def read(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        force_refresh: bool = False,
        max_age_s: float | None = None,
    ) -> T:
        """Serve ``key`` from cache or call ``fetcher`` and store its result.

        A failing fetcher leaves any existing entry untouched and the error
        propagates to the caller.
        """
        if not force_refresh:
            entry = self._entries.get(key)
            if self._is_valid(entry, max_age_s):
                logger.debug("cache hit: %s", key)
                return entry.value
        logger.debug("cache miss: %s (force_refresh=%s)", key, force_refresh)
        value = await fetcher()
        self.put(key, value)
        return value

    def invalidate(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._is_valid(self._entries.get(key), None)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["TtlCache", "CacheEntry", "DEFAULT_MAX_AGE_S"]
