"""Tests for the time-bounded in-memory cache."""

import asyncio

import pytest

from services.shared.cache import CacheStats, TTLCache


class TestTTLCache:
    """Storage, expiry and statistics."""

    def test_round_trip_before_expiry(self, clock):
        cache = TTLCache(60, clock=clock)
        value = {"title": "Acme"}
        cache.put("k", value)

        clock.advance(59.9)
        assert cache.get("k") is value

    def test_expired_entry_is_absent_and_evicted(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.put("k", "v")

        clock.advance(61)
        assert cache.get("k") is None
        assert cache.size() == 0
        assert cache.metrics.evictions == 1

    def test_entry_expires_exactly_at_ttl(self, clock):
        cache = TTLCache(10, clock=clock)
        cache.put("k", "v")
        clock.advance(10)
        assert "k" not in cache
        assert cache.get("k") is None

    def test_repopulating_restarts_the_ttl(self, clock):
        cache = TTLCache(10, clock=clock)
        cache.put("k", "old")
        clock.advance(8)
        cache.put("k", "new")
        clock.advance(8)
        assert cache.get("k") == "new"

    def test_non_positive_ttl_rejected(self):
        with pytest.raises(ValueError):
            TTLCache(0)
        with pytest.raises(ValueError):
            TTLCache(-5)

    def test_delete_and_clear(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.put("a", 1)
        cache.put("b", 2)

        assert cache.delete("a") is True
        assert cache.delete("a") is False
        cache.clear()
        assert cache.size() == 0
        assert cache.get("b") is None

    def test_cleanup_expired_only_removes_stale_entries(self, clock):
        cache = TTLCache(10, clock=clock)
        cache.put("old", 1)
        clock.advance(6)
        cache.put("fresh", 2)
        clock.advance(5)

        assert cache.cleanup_expired() == 1
        assert cache.size() == 1
        assert cache.get("fresh") == 2

    def test_stats(self, clock):
        cache = TTLCache(10, name="fetch_cache", clock=clock)
        cache.put("k", "v")
        cache.get("k")
        cache.get("missing")

        stats = cache.stats()
        assert stats["name"] == "fetch_cache"
        assert stats["size"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["stores"] == 1
        assert stats["hit_rate"] == 0.5

    def test_hit_rate_without_lookups(self):
        assert CacheStats().hit_rate == 0.0


class TestGetOrLoad:
    """Per-key load-through behaviour."""

    @pytest.mark.asyncio
    async def test_loads_once_then_serves_cache(self, clock):
        cache = TTLCache(60, clock=clock)
        calls = []

        async def loader():
            calls.append(1)
            return "value"

        assert await cache.get_or_load("k", loader) == "value"
        assert await cache.get_or_load("k", loader) == "value"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_reloads_after_expiry(self, clock):
        cache = TTLCache(60, clock=clock)
        values = iter(["first", "second"])

        async def loader():
            return next(values)

        assert await cache.get_or_load("k", loader) == "first"
        clock.advance(60)
        assert await cache.get_or_load("k", loader) == "second"

    @pytest.mark.asyncio
    async def test_loader_error_propagates_and_stores_nothing(self, clock):
        cache = TTLCache(60, clock=clock)

        async def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.get_or_load("k", failing)
        assert cache.size() == 0

    @pytest.mark.asyncio
    async def test_uncacheable_value_is_returned_but_not_stored(self, clock):
        cache = TTLCache(60, clock=clock)

        async def loader():
            return "degraded"

        result = await cache.get_or_load("k", loader, cacheable=lambda v: v != "degraded")
        assert result == "degraded"
        assert cache.size() == 0

    @pytest.mark.asyncio
    async def test_concurrent_loads_of_one_key_are_coalesced(self, clock):
        cache = TTLCache(60, clock=clock)
        release = asyncio.Event()
        calls = []

        async def loader():
            calls.append(1)
            await release.wait()
            return "value"

        first = asyncio.create_task(cache.get_or_load("k", loader))
        second = asyncio.create_task(cache.get_or_load("k", loader))
        await asyncio.sleep(0)
        release.set()

        assert await asyncio.gather(first, second) == ["value", "value"]
        assert len(calls) == 1
        assert cache._locks == {}

    @pytest.mark.asyncio
    async def test_different_keys_do_not_wait_on_each_other(self, clock):
        cache = TTLCache(60, clock=clock)
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "slow"

        async def fast():
            return "fast"

        blocked = asyncio.create_task(cache.get_or_load("a", slow))
        await asyncio.sleep(0)

        assert await asyncio.wait_for(cache.get_or_load("b", fast), timeout=1) == "fast"
        release.set()
        assert await blocked == "slow"
