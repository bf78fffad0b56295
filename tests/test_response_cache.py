"""
Unit tests for the in-memory response cache.

Tests cover:
- TTL freshness boundaries with a controllable clock
- Overwrite semantics on refetch
- Single-flight deduplication of concurrent fetches
- Error propagation (errors are never cached)
- Statistics and invalidation
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from coinpulse.core.exceptions import ConfigurationError, TransportError
from coinpulse.services.data_manager import CacheEntry, ResponseCache

KEY = "https://api.coingecko.com/api/v3/coins/markets?page=1&vs_currency=usd"


@pytest.fixture
def cache(clock):
    """Cache with the default 30s TTL driven by the fake clock"""
    return ResponseCache(ttl_ms=30_000, clock=clock)


class TestInitialization:
    """Test cache construction"""

    def test_default_ttl_is_30_seconds(self):
        """Default TTL matches the dashboard polling period"""
        assert ResponseCache().ttl_ms == 30_000

    def test_rejects_non_positive_ttl(self):
        """A zero TTL is a configuration error"""
        with pytest.raises(ConfigurationError):
            ResponseCache(ttl_ms=0)

    def test_starts_empty(self, cache):
        """New cache has no entries"""
        assert len(cache) == 0
        assert cache.peek(KEY) is None


class TestFreshness:
    """Test TTL evaluation at call time"""

    @pytest.mark.asyncio
    async def test_second_call_within_ttl_uses_cache(self, cache, clock):
        """A call at T+29999ms must not trigger a second fetch"""
        fetch = AsyncMock(return_value={"v": 1})

        await cache.get_or_fetch(KEY, fetch)
        clock.advance(29_999)
        result = await cache.get_or_fetch(KEY, fetch)

        assert result == {"v": 1}
        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_call_after_ttl_refetches(self, cache, clock):
        """A call at T+30001ms must trigger a second fetch"""
        fetch = AsyncMock(side_effect=[{"v": 1}, {"v": 2}])

        await cache.get_or_fetch(KEY, fetch)
        clock.advance(30_001)
        result = await cache.get_or_fetch(KEY, fetch)

        assert result == {"v": 2}
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_entry_exactly_ttl_old_is_stale(self, cache, clock):
        """Freshness is strict: age must be below the TTL"""
        fetch = AsyncMock(side_effect=[1, 2])

        await cache.get_or_fetch(KEY, fetch)
        clock.advance(30_000)

        assert await cache.get_or_fetch(KEY, fetch) == 2

    def test_is_fresh_boundaries(self, cache, clock):
        """is_fresh compares entry age with TTL"""
        entry = CacheEntry(key=KEY, payload=[], fetched_at_ms=clock())

        assert cache.is_fresh(entry, clock() + 29_999) is True
        assert cache.is_fresh(entry, clock() + 30_000) is False

    def test_peek_ignores_stale_entries(self, cache, clock):
        """peek returns only fresh payloads and never fetches"""
        cache.set(KEY, ["btc"])
        assert cache.peek(KEY) == ["btc"]

        clock.advance(30_001)
        assert cache.peek(KEY) is None
        assert cache.get_entry(KEY) is not None  # Stale entry is still stored

    @pytest.mark.asyncio
    async def test_different_keys_are_independent(self, cache):
        """Each key gets its own fetch"""
        fetch = AsyncMock(side_effect=["usd", "eur"])

        assert await cache.get_or_fetch(KEY, fetch) == "usd"
        assert await cache.get_or_fetch(KEY.replace("usd", "eur"), fetch) == "eur"
        assert fetch.await_count == 2


class TestOverwrite:
    """Test that refetches replace entries wholesale"""

    @pytest.mark.asyncio
    async def test_refetch_replaces_payload_and_timestamp(self, cache, clock):
        """No merge with the previous value"""
        first_fetch_at = clock()
        fetch = AsyncMock(side_effect=[{"a": 1, "b": 2}, {"c": 3}])

        await cache.get_or_fetch(KEY, fetch)
        clock.advance(45_000)
        await cache.get_or_fetch(KEY, fetch)

        entry = cache.get_entry(KEY)
        assert entry.payload == {"c": 3}
        assert entry.fetched_at_ms == first_fetch_at + 45_000

    def test_set_returns_new_entry(self, cache, clock):
        """set stamps the entry with the clock"""
        entry = cache.set(KEY, [1, 2])

        assert entry == CacheEntry(key=KEY, payload=[1, 2], fetched_at_ms=clock())


class TestSingleFlight:
    """Test deduplication of concurrent identical fetches"""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(self, cache):
        """Callers arriving while a fetch is in flight await the same request"""
        release = asyncio.Event()
        calls = 0

        async def slow_fetch():
            nonlocal calls
            calls += 1
            await release.wait()
            return ["bitcoin"]

        first = asyncio.create_task(cache.get_or_fetch(KEY, slow_fetch))
        second = asyncio.create_task(cache.get_or_fetch(KEY, slow_fetch))
        await asyncio.sleep(0)

        assert cache.is_in_flight(KEY)
        release.set()
        results = await asyncio.gather(first, second)

        assert results == [["bitcoin"], ["bitcoin"]]
        assert calls == 1
        assert not cache.is_in_flight(KEY)

    @pytest.mark.asyncio
    async def test_error_propagates_to_all_waiters(self, cache):
        """A failed shared fetch fails every caller and caches nothing"""
        release = asyncio.Event()

        async def failing_fetch():
            await release.wait()
            raise TransportError("connection reset")

        first = asyncio.create_task(cache.get_or_fetch(KEY, failing_fetch))
        second = asyncio.create_task(cache.get_or_fetch(KEY, failing_fetch))
        await asyncio.sleep(0)
        release.set()

        results = await asyncio.gather(first, second, return_exceptions=True)

        assert all(isinstance(r, TransportError) for r in results)
        assert KEY not in cache
        assert not cache.is_in_flight(KEY)

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_fetch(self, cache):
        """Other waiters still receive the result"""
        release = asyncio.Event()

        async def slow_fetch():
            await release.wait()
            return 42

        first = asyncio.create_task(cache.get_or_fetch(KEY, slow_fetch))
        second = asyncio.create_task(cache.get_or_fetch(KEY, slow_fetch))
        await asyncio.sleep(0)

        first.cancel()
        release.set()

        assert await second == 42
        assert cache.peek(KEY) == 42


class TestErrors:
    """Test failure handling"""

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_stale_entry(self, cache, clock):
        """A failed refetch leaves the previous entry untouched"""
        await cache.get_or_fetch(KEY, AsyncMock(return_value="old"))
        old_entry = cache.get_entry(KEY)
        clock.advance(31_000)

        with pytest.raises(TransportError):
            await cache.get_or_fetch(
                KEY, AsyncMock(side_effect=TransportError("timeout"))
            )

        assert cache.get_entry(KEY) is old_entry

    @pytest.mark.asyncio
    async def test_next_call_after_error_fetches_again(self, cache):
        """Errors are not cached"""
        fetch = AsyncMock(side_effect=[TransportError("down"), "ok"])

        with pytest.raises(TransportError):
            await cache.get_or_fetch(KEY, fetch)

        assert await cache.get_or_fetch(KEY, fetch) == "ok"


class TestMaintenance:
    """Test invalidation and statistics"""

    def test_invalidate(self, cache):
        """invalidate removes a single entry"""
        cache.set(KEY, 1)

        assert cache.invalidate(KEY) is True
        assert cache.invalidate(KEY) is False
        assert KEY not in cache

    def test_clear(self, cache):
        """clear removes all entries"""
        cache.set(KEY, 1)
        cache.set(KEY + "&x=1", 2)
        cache.clear()

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_stats_count_hits_and_misses(self, cache):
        """Stats reflect cache usage"""
        fetch = AsyncMock(return_value=[])
        await cache.get_or_fetch(KEY, fetch)
        await cache.get_or_fetch(KEY, fetch)
        await cache.get_or_fetch(KEY, fetch)

        stats = cache.stats()

        assert stats["entries"] == 1
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["coalesced"] == 0
        assert stats["hit_ratio"] == 66.67
        assert stats["in_flight"] == 0
        assert stats["ttl_ms"] == 30_000

    @pytest.mark.asyncio
    async def test_stats_count_coalesced_callers(self, cache):
        """Callers joining an in-flight fetch count toward the hit ratio"""
        release = asyncio.Event()

        async def slow_fetch():
            await release.wait()
            return ["bitcoin"]

        callers = [
            asyncio.create_task(cache.get_or_fetch(KEY, slow_fetch)) for _ in range(4)
        ]
        await asyncio.sleep(0)
        release.set()
        await asyncio.gather(*callers)

        stats = cache.stats()

        assert stats["misses"] == 1
        assert stats["coalesced"] == 3
        assert stats["hits"] == 0
        assert stats["hit_ratio"] == 75.0
