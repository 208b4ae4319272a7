"""
Key/value backends for the employee cache.
"""

import asyncio
import time
from typing import Dict, Optional, Tuple

import redis.asyncio as redis

from shared.logging import get_logger


class MemoryCacheBackend:
    """In-process backend. A single asyncio lock guards the entry map."""

    name = "memory"

    def __init__(self):
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, expires_at = entry
            if expires_at is not None and time.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        expires_at = time.monotonic() + ttl if ttl else None
        async with self._lock:
            self._entries[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()


class RedisCacheBackend:
    """Redis backend; keys live under ``key_prefix``."""

    name = "redis"

    def __init__(self, redis_url: str, key_prefix: str = "employees"):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.logger = get_logger("employees.cache.redis")
        self._redis: Optional[redis.Redis] = None

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url, decode_responses=True)
        return self._redis

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def get(self, key: str) -> Optional[str]:
        redis_client = await self._get_redis()
        value = await redis_client.get(self._make_key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        redis_client = await self._get_redis()
        await redis_client.set(self._make_key(key), value, ex=ttl or None)

    async def delete(self, key: str) -> None:
        redis_client = await self._get_redis()
        await redis_client.delete(self._make_key(key))

    async def ping(self) -> bool:
        redis_client = await self._get_redis()
        return bool(await redis_client.ping())

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


def create_backend(backend: str, redis_url: Optional[str] = None):
    """Build the backend named in configuration."""
    if backend == "memory":
        return MemoryCacheBackend()
    if backend == "redis":
        if not redis_url:
            raise ValueError("redis_url is required for the redis cache backend")
        return RedisCacheBackend(redis_url)
    raise ValueError(f"Unknown cache backend: {backend}")
