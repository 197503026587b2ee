"""
Response cache for completions.

Entries are keyed by a hash of (provider, model, prompt) and expire after a
fixed TTL. The cache only saves latency and cost: a miss always falls through
to the vendor.
"""

import hashlib
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


def make_cache_key(model: str, prompt: str, provider: Optional[str] = None) -> str:
    """Deterministic cache key for a completion."""
    raw = f"{model}:{prompt}"
    if provider:
        raw = f"{provider}:{raw}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


@dataclass
class CacheEntry:
    """A cached completion."""
    key: str
    result: str
    stored_at: float


class ResponseCache(ABC):
    """Interface shared by cache backends."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the cached result, or None on a miss."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass


class InMemoryResponseCache(ResponseCache):
    """
    Process-local cache.

    Expired entries are dropped when read and swept on every write.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at > self.ttl_seconds

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            self._entries.pop(key, None)
            return None
        return entry.result

    async def set(self, key: str, value: str) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry(key=key, result=value, stored_at=now)
        self.purge_expired(now)

    def purge_expired(self, now: Optional[float] = None) -> int:
        """Remove expired entries and return how many were dropped."""
        if now is None:
            now = self._clock()
        expired = [k for k, e in self._entries.items() if self._expired(e, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def clear(self) -> None:
        self._entries.clear()


class RedisResponseCache(ResponseCache):
    """
    Redis-backed cache for deployments running several processes.

    Redis failures are logged and reported as misses.
    """

    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        prefix: str = "ai:completion:",
    ):
        self._client = client
        self.ttl_seconds = ttl_seconds
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> "RedisResponseCache":
        return cls(redis.from_url(url, decode_responses=True), ttl_seconds=ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self._client.get(self._prefix + key)
        except RedisError as e:
            logger.warning(f"Cache lookup failed for {key}: {e}")
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.setex(self._prefix + key, int(self.ttl_seconds), value)
        except RedisError as e:
            logger.warning(f"Cache store failed for {key}: {e}")

    async def clear(self) -> None:
        async for key in self._client.scan_iter(match=self._prefix + "*"):
            await self._client.delete(key)

    async def close(self) -> None:
        await self._client.aclose()
