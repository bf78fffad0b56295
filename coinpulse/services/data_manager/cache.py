"""
In-memory response cache with a fixed time-to-live.

Provides:
- Freshness evaluated at call time (no background expiry)
- Single-flight fetching: concurrent callers for the same stale key await
  one shared in-flight request instead of issuing duplicates
- Injectable clock for deterministic tests
- Hit/miss statistics logging

The cache is owned by one asyncio event loop and is not thread-safe.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from ...core.exceptions import ConfigurationError
from .types import CacheEntry, Clock, epoch_millis

logger = structlog.get_logger(__name__)

DEFAULT_TTL_MS = 30_000  # 30 seconds


class ResponseCache:
    """
    Response cache keyed by request URL.

    Create one per process or session and pass it to every service that
    should share cached responses.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Clock | None = None):
        """
        Initialize the cache.

        Args:
            ttl_ms: Entries younger than this many milliseconds are fresh
            clock: Returns current epoch milliseconds (default: wall clock)

        Raises:
            ConfigurationError: If ttl_ms is not positive
        """
        if ttl_ms <= 0:
            raise ConfigurationError("Cache TTL must be positive", ttl_ms=ttl_ms)

        self.ttl_ms = ttl_ms
        self._clock = clock or epoch_millis
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Future] = {}
        self._hits = 0
        self._misses = 0
        self._coalesced = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def now(self) -> int:
        """Current time from the cache clock."""
        return self._clock()

    def is_fresh(self, entry: CacheEntry, now_ms: int | None = None) -> bool:
        """True when the entry is younger than the TTL."""
        if now_ms is None:
            now_ms = self.now()
        return entry.age_ms(now_ms) < self.ttl_ms

    def get_entry(self, key: str) -> CacheEntry | None:
        """Stored entry for a key, fresh or stale."""
        return self._entries.get(key)

    def peek(self, key: str) -> Any | None:
        """
        Get a fresh payload without fetching.

        Args:
            key: Request key

        Returns:
            Cached payload, or None when missing or stale
        """
        entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry.payload

    def set(self, key: str, payload: Any) -> CacheEntry:
        """
        Store a payload stamped with the current time.

        Any previous entry for the key is replaced, never merged.
        """
        entry = CacheEntry(key=key, payload=payload, fetched_at_ms=self.now())
        self._entries[key] = entry
        logger.debug("cache_set", key=key, fetched_at_ms=entry.fetched_at_ms)
        return entry

    def invalidate(self, key: str) -> bool:
        """
        Drop a cached entry.

        Returns:
            True if an entry was removed
        """
        removed = self._entries.pop(key, None) is not None
        logger.debug("cache_invalidate", key=key, removed=removed)
        return removed

    def clear(self) -> None:
        """Drop all entries. In-flight fetches still complete and store."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("cache_cleared", entries=count)

    def is_in_flight(self, key: str) -> bool:
        """True while a fetch for the key is outstanding."""
        return key in self._in_flight

    async def get_or_fetch(
        self,
        key: str,
        fetch_func: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Get a fresh cached payload, or fetch, store and return it.

        Concurrent callers for the same missing or stale key share a single
        call of ``fetch_func``. Errors are not cached: they propagate to every
        waiting caller and a previous stale entry is left untouched.

        Args:
            key: Request key
            fetch_func: Coroutine factory performing the network request

        Returns:
            Cached or freshly fetched payload
        """
        entry = self._entries.get(key)
        if entry is not None and self.is_fresh(entry):
            self._hits += 1
            logger.debug("cache_hit", key=key, age_ms=entry.age_ms(self.now()))
            return entry.payload

        in_flight = self._in_flight.get(key)
        if in_flight is not None:
            self._coalesced += 1
            logger.debug("cache_coalesced", key=key)
            return await asyncio.shield(in_flight)

        self._misses += 1
        logger.debug("cache_miss", key=key, stale=entry is not None)

        task = asyncio.ensure_future(self._fetch_and_store(key, fetch_func))
        self._in_flight[key] = task
        task.add_done_callback(lambda done: self._release(key, done))

        # Shielded so a cancelled caller does not cancel the fetch for others
        return await asyncio.shield(task)

    async def _fetch_and_store(
        self,
        key: str,
        fetch_func: Callable[[], Awaitable[Any]],
    ) -> Any:
        payload = await fetch_func()
        self.set(key, payload)
        return payload

    def _release(self, key: str, task: asyncio.Future) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

        # Retrieve the exception so an abandoned task does not warn on exit
        if not task.cancelled() and task.exception() is not None:
            logger.debug("cache_fetch_failed", key=key, error=str(task.exception()))

    def stats(self) -> dict[str, Any]:
        """
        Cache statistics.

        Returns:
            Dict with entry count, hits, misses, coalesced callers, hit ratio,
            in-flight count and TTL. Callers that joined an in-flight fetch
            count as served without a request of their own.
        """
        served = self._hits + self._coalesced
        total_requests = served + self._misses
        hit_ratio = (served / total_requests * 100) if total_requests > 0 else 0
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "coalesced": self._coalesced,
            "hit_ratio": round(hit_ratio, 2),
            "in_flight": len(self._in_flight),
            "ttl_ms": self.ttl_ms,
        }
