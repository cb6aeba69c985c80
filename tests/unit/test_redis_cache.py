from __future__ import annotations

import pytest

from guestbook.cache.redis_cache import RedisCache
from guestbook.errors import CacheError
from tests.fakes import FakeRedis


@pytest.mark.asyncio
async def test_set_get_with_ttl(cache: RedisCache, fake_redis: FakeRedis) -> None:
    await cache.set("k", "v", ttl_seconds=300)
    assert await cache.get("k") == "v"
    assert fake_redis.ttl("k") == 300


@pytest.mark.asyncio
async def test_value_expires_after_ttl(cache: RedisCache, fake_redis: FakeRedis) -> None:
    await cache.set("k", "v", ttl_seconds=300)
    fake_redis.advance(299)
    assert await cache.get("k") == "v"
    fake_redis.advance(1)
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_delete_absent_key_is_noop(cache: RedisCache) -> None:
    assert await cache.delete("missing") == 0


@pytest.mark.asyncio
async def test_incr_and_decr(cache: RedisCache) -> None:
    assert await cache.incr("n") == 1
    assert await cache.incr("n", 4) == 5
    assert await cache.incr("n", -2) == 3


@pytest.mark.asyncio
async def test_failures_raise_cache_error(cache: RedisCache, fake_redis: FakeRedis) -> None:
    fake_redis.down = True
    with pytest.raises(CacheError, match="GET k failed"):
        await cache.get("k")
    with pytest.raises(CacheError, match="SET k failed"):
        await cache.set("k", "v", ttl_seconds=1)
    with pytest.raises(CacheError, match="DEL k failed"):
        await cache.delete("k")
    with pytest.raises(CacheError, match="INCRBY k failed"):
        await cache.incr("k")


@pytest.mark.asyncio
async def test_ping_reports_liveness(cache: RedisCache, fake_redis: FakeRedis) -> None:
    assert await cache.ping() is True
    fake_redis.down = True
    assert await cache.ping() is False


@pytest.mark.asyncio
async def test_timeout_is_cache_error() -> None:
    class SlowClient:
        async def get(self, key: str) -> str:
            raise TimeoutError("read timed out")

    with pytest.raises(CacheError):
        await RedisCache(SlowClient()).get("k")
