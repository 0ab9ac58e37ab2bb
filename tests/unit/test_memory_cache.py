"""Unit tests for TTLCache."""

import asyncio

import pytest

from src.data.cache.memory_cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl_seconds=60, clock=clock)


class TestTTLCache:
    """Tests for TTLCache."""

    def test_invalid_ttl(self):
        with pytest.raises(ValueError):
            TTLCache(ttl_seconds=0)

    def test_get_before_expiry(self, cache, clock):
        cache.set("vaults", [1, 2])
        clock.now = 59.9

        assert cache.get("vaults") == [1, 2]
        assert "vaults" in cache

    def test_expires(self, cache, clock):
        cache.set("vaults", [1, 2])
        clock.now = 60

        assert cache.get("vaults", "missing") == "missing"
        assert len(cache) == 0

    def test_per_entry_ttl(self, cache, clock):
        cache.set("short", 1, ttl_seconds=5)
        clock.now = 10

        assert cache.get("short") is None

    def test_invalidate(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)

        cache.invalidate("a")
        assert "a" not in cache
        assert cache.get("b") == 2

        cache.invalidate()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_get_or_fetch_caches(self, cache, clock):
        calls = []

        async def factory():
            calls.append(1)
            return {"apy": 12}

        assert await cache.get_or_fetch("apys", factory) == {"apy": 12}
        assert await cache.get_or_fetch("apys", factory) == {"apy": 12}
        assert len(calls) == 1

        clock.now = 120
        await cache.get_or_fetch("apys", factory)
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_one_call(self, cache):
        calls = []

        async def factory():
            calls.append(1)
            await asyncio.sleep(0.01)
            return "value"

        results = await asyncio.gather(*(cache.get_or_fetch("key", factory) for _ in range(5)))

        assert results == ["value"] * 5
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_errors_are_not_cached(self, cache):
        async def failing():
            raise RuntimeError("upstream down")

        async def working():
            return "ok"

        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("key", failing)

        assert "key" not in cache
        assert await cache.get_or_fetch("key", working) == "ok"
