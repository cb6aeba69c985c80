from __future__ import annotations

import asyncio
from typing import Any

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from guestbook.errors import CacheError

logger = structlog.get_logger()

_CACHE_FAILURES = (RedisError, OSError, asyncio.TimeoutError)


class RedisCache:
    """Key-value cache on redis.asyncio.

    Every Redis or network failure is raised as ``CacheError`` so callers only
    have one exception type to treat as a miss.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 5.0) -> RedisCache:
        client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
            health_check_interval=30,
        )
        return cls(client)

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except _CACHE_FAILURES as e:
            logger.warning("cache_close_failed", error=str(e))

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except _CACHE_FAILURES as e:
            raise CacheError(f"GET {key} failed: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except _CACHE_FAILURES as e:
            raise CacheError(f"SET {key} failed: {e}") from e

    async def delete(self, key: str) -> int:
        """Delete ``key``. Returns the number of keys removed (0 when absent)."""
        try:
            return int(await self._client.delete(key))
        except _CACHE_FAILURES as e:
            raise CacheError(f"DEL {key} failed: {e}") from e

    async def incr(self, key: str, delta: int = 1) -> int:
        try:
            return int(await self._client.incrby(key, delta))
        except _CACHE_FAILURES as e:
            raise CacheError(f"INCRBY {key} failed: {e}") from e

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except _CACHE_FAILURES as e:
            logger.debug("cache_ping_failed", error=str(e))
            return False
