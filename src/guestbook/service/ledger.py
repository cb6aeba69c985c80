from __future__ import annotations

import structlog

from guestbook.cache.advisory import AdvisoryResult, advisory
from guestbook.cache.redis_cache import RedisCache
from guestbook.errors import CacheError

logger = structlog.get_logger()

# Live count: +1 on create, -1 on delete.
LIVE_TOTAL_KEY = "stats:total_entries"
# Cumulative creations: +1 on create only.
CREATED_TOTAL_KEY = "stats:created_entries"


class StatsLedger:
    """Advisory entry counters kept in the cache.

    The counters are never reconciled with the store. They reset when the
    cache is flushed or restarted and skip updates while it is unreachable;
    ``EntryService.read_stats`` reports the store's COUNT(*) beside them so
    drift is visible.
    """

    def __init__(self, cache: RedisCache | None) -> None:
        self._cache = cache

    async def bump(self, key: str, delta: int) -> AdvisoryResult:
        call = self._cache.incr(key, delta) if self._cache else None
        return await advisory("incr", key, call)

    async def read(self, key: str) -> int | None:
        if self._cache is None:
            return None
        try:
            raw = await self._cache.get(key)
        except CacheError as e:
            logger.warning("stats_read_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("stats_value_invalid", key=key, value=raw)
            return None

    async def record_created(self) -> list[AdvisoryResult]:
        return [
            await self.bump(LIVE_TOTAL_KEY, 1),
            await self.bump(CREATED_TOTAL_KEY, 1),
        ]

    async def record_deleted(self) -> list[AdvisoryResult]:
        return [await self.bump(LIVE_TOTAL_KEY, -1)]

    async def live_total(self) -> int | None:
        return await self.read(LIVE_TOTAL_KEY)

    async def created_total(self) -> int | None:
        return await self.read(CREATED_TOTAL_KEY)
