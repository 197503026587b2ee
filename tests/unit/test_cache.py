"""
Unit tests for the response caches.
"""
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from blog_ai_gateway.core.cache import InMemoryResponseCache, RedisResponseCache, make_cache_key


class TestCacheKey:
    """Test cache key derivation."""

    def test_deterministic(self):
        assert make_cache_key("deepseek-chat", "Hello") == make_cache_key("deepseek-chat", "Hello")

    def test_distinguishes_inputs(self):
        base = make_cache_key("deepseek-chat", "Hello", provider="deepseek")
        assert base != make_cache_key("deepseek-chat", "Hello!", provider="deepseek")
        assert base != make_cache_key("gpt-4", "Hello", provider="deepseek")
        assert base != make_cache_key("deepseek-chat", "Hello", provider="openai")

    def test_md5_hex(self):
        key = make_cache_key("m", "p")
        assert len(key) == 32
        int(key, 16)


class TestInMemoryResponseCache:
    """Test the process-local cache."""

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, clock):
        cache = InMemoryResponseCache(ttl_seconds=300, clock=clock)
        await cache.set("k", "value")
        clock.advance(299)
        assert await cache.get("k") == "value"

    @pytest.mark.asyncio
    async def test_miss_after_ttl(self, clock):
        """Test that an expired entry is dropped when read."""
        cache = InMemoryResponseCache(ttl_seconds=300, clock=clock)
        await cache.set("k", "value")
        clock.advance(301)
        assert await cache.get("k") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_unknown_key(self, clock):
        cache = InMemoryResponseCache(clock=clock)
        assert await cache.get("missing") is None

    @pytest.mark.asyncio
    async def test_write_sweeps_expired(self, clock):
        """Test that writes purge every expired entry."""
        cache = InMemoryResponseCache(ttl_seconds=10, clock=clock)
        await cache.set("a", "1")
        await cache.set("b", "2")
        clock.advance(20)
        await cache.set("c", "3")
        assert len(cache) == 1
        assert await cache.get("c") == "3"

    @pytest.mark.asyncio
    async def test_overwrite_refreshes_entry(self, clock):
        cache = InMemoryResponseCache(ttl_seconds=10, clock=clock)
        await cache.set("k", "old")
        clock.advance(8)
        await cache.set("k", "new")
        clock.advance(8)
        assert await cache.get("k") == "new"

    @pytest.mark.asyncio
    async def test_clear(self, clock):
        cache = InMemoryResponseCache(clock=clock)
        await cache.set("k", "v")
        await cache.clear()
        assert len(cache) == 0

    def test_purge_count(self, clock):
        cache = InMemoryResponseCache(ttl_seconds=5, clock=clock)
        assert cache.purge_expired() == 0


class TestRedisResponseCache:
    """Test the Redis cache against a mocked client."""

    @pytest.mark.asyncio
    async def test_get(self):
        client = AsyncMock()
        client.get.return_value = "cached"
        cache = RedisResponseCache(client, ttl_seconds=300)

        assert await cache.get("k") == "cached"
        client.get.assert_awaited_once_with("ai:completion:k")

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self):
        client = AsyncMock()
        client.get.return_value = b"cached"
        cache = RedisResponseCache(client)
        assert await cache.get("k") == "cached"

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self):
        client = AsyncMock()
        cache = RedisResponseCache(client, ttl_seconds=300)

        await cache.set("k", "value")
        client.setex.assert_awaited_once_with("ai:completion:k", 300, "value")

    @pytest.mark.asyncio
    async def test_redis_failure_is_a_miss(self):
        """Test that Redis outages degrade to cache misses."""
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("down")
        client.setex.side_effect = RedisConnectionError("down")
        cache = RedisResponseCache(client)

        assert await cache.get("k") is None
        await cache.set("k", "value")

    @pytest.mark.asyncio
    async def test_close(self):
        client = AsyncMock()
        cache = RedisResponseCache(client)
        await cache.close()
        client.aclose.assert_awaited_once()
