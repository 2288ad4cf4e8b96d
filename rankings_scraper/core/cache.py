"""
In-process TTL cache with single-flight computation.

Entries are keyed by string. A computation for a key runs at most once at
a time: callers arriving while it is in flight await the same task.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    """Memoized payload."""
    key: str
    payload: Any
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_valid(self, ttl: float, now: float) -> bool:
        return self.age(now) < ttl


class TTLCache:
    """
    Time-bounded memoization layer.

    Usage:
        cache = TTLCache()
        records = await cache.get_or_compute("year:2024", 86400, compute)
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize cache.

        Args:
            clock: Time source in seconds (injectable for tests)
        """
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task] = {}

    def get(self, key: str, ttl: float) -> Optional[CacheEntry]:
        """Return the entry for key if still valid, dropping it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if not entry.is_valid(ttl, self._clock()):
            del self._entries[key]
            return None

        return entry

    def set(self, key: str, payload: Any) -> CacheEntry:
        """Store payload under key with the current timestamp."""
        entry = CacheEntry(key=key, payload=payload, created_at=self._clock())
        self._entries[key] = entry
        return entry

    async def get_or_compute(
        self,
        key: str,
        ttl: float,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return cached payload or compute, store and return it.

        Args:
            key: Cache key
            ttl: Maximum entry age in seconds
            compute: Coroutine function producing the payload

        Returns:
            Cached or freshly computed payload
        """
        # No await between lookup and registration, so this is atomic on the loop
        entry = self.get(key, ttl)
        if entry is not None:
            logger.debug("cache_hit", key=key)
            return entry.payload

        task = self._inflight.get(key)
        if task is None:
            logger.debug("cache_miss", key=key)
            task = asyncio.ensure_future(self._compute(key, compute))
            task.add_done_callback(_retrieve_exception)
            self._inflight[key] = task
        else:
            logger.debug("cache_join_inflight", key=key)

        return await asyncio.shield(task)

    async def _compute(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        try:
            payload = await compute()
            self.set(key, payload)
            return payload
        finally:
            self._inflight.pop(key, None)

    def invalidate(self, key: str) -> None:
        """Drop a single entry."""
        self._entries.pop(key, None)

    def clear(self, prefix: Optional[str] = None) -> None:
        """Drop all entries, or only those whose key starts with prefix."""
        if prefix is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def entries(self, prefix: str = "") -> list[tuple[CacheEntry, float]]:
        """Return (entry, age in seconds) pairs for keys with prefix."""
        now = self._clock()
        return [
            (entry, entry.age(now))
            for key, entry in sorted(self._entries.items())
            if key.startswith(prefix)
        ]

    def __len__(self) -> int:
        return len(self._entries)


def _retrieve_exception(task: asyncio.Task) -> None:
    # Waiters may all be cancelled before a failed computation finishes
    if not task.cancelled() and task.exception() is not None:
        logger.debug("cache_compute_failed", error=str(task.exception()))
