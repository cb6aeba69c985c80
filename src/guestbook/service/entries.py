from __future__ import annotations

import structlog

from guestbook.cache.advisory import AdvisoryResult, advisory
from guestbook.cache.redis_cache import RedisCache
from guestbook.cache.snapshot import RECENT_ENTRIES_KEY, decode_entries, encode_entries
from guestbook.errors import CacheError, NotFoundError, ValidationError
from guestbook.models.domain import (
    NAME_MAX_LENGTH,
    Entry,
    HealthReport,
    RecentEntries,
    StatsReport,
)
from guestbook.observability.metrics import GuestbookMetrics
from guestbook.service.ledger import StatsLedger
from guestbook.service.monitor import HealthMonitor
from guestbook.store.base import EntryStore

logger = structlog.get_logger()


def _validate(name: str, message: str) -> None:
    if not name or not name.strip() or not message or not message.strip():
        raise ValidationError("Name and message are required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must be at most {NAME_MAX_LENGTH} characters")


class EntryService:
    """Cache-aside coordinator for guestbook entries.

    Reads try the cached snapshot first and repopulate it from the store on a
    miss. Writes go to the store first and then delete the snapshot key. The
    cache is fail-open: a ``CacheError`` anywhere is treated as a miss or a
    skipped side effect, while a ``StoreError`` always propagates.
    """

    def __init__(
        self,
        store: EntryStore,
        cache: RedisCache | None,
        metrics: GuestbookMetrics,
        monitor: HealthMonitor | None = None,
        ttl_seconds: int = 300,
        recent_limit: int = 100,
    ) -> None:
        self._store = store
        self._cache = cache
        self._metrics = metrics
        self._ledger = StatsLedger(cache)
        self._monitor = monitor or HealthMonitor(store, cache, metrics)
        self._ttl_seconds = ttl_seconds
        self._recent_limit = recent_limit

    @property
    def store(self) -> EntryStore:
        return self._store

    @property
    def cache(self) -> RedisCache | None:
        return self._cache

    @property
    def ledger(self) -> StatsLedger:
        return self._ledger

    @property
    def monitor(self) -> HealthMonitor:
        return self._monitor

    async def _cached_entries(self) -> list[Entry] | None:
        if self._cache is None:
            return None
        try:
            payload = await self._cache.get(RECENT_ENTRIES_KEY)
        except CacheError as e:
            logger.warning("cache_miss", reason=str(e))
            return None
        if payload is None:
            logger.info("cache_miss", reason="absent")
            return None
        try:
            return decode_entries(payload)
        except ValueError as e:
            logger.warning("cache_miss", reason=str(e))
            return None

    async def read_recent(self) -> RecentEntries:
        cached = await self._cached_entries()
        if cached is not None:
            self._metrics.cache_hits.inc()
            logger.info("cache_hit", count=len(cached))
            return RecentEntries(entries=cached, cache_hit=True)

        self._metrics.cache_misses.inc()
        entries = await self._store.list_recent(self._recent_limit)

        if self._cache is not None:
            result = await advisory(
                "set",
                RECENT_ENTRIES_KEY,
                self._cache.set(RECENT_ENTRIES_KEY, encode_entries(entries), self._ttl_seconds),
            )
            if result.ok:
                logger.info("cache_set", count=len(entries), ttl_seconds=self._ttl_seconds)
        return RecentEntries(entries=entries, cache_hit=False)

    async def list_recent(self) -> list[Entry]:
        """Most recent entries, newest first. Never fails because of the cache."""
        return (await self.read_recent()).entries

    async def _invalidate(self, reason: str) -> AdvisoryResult:
        call = self._cache.delete(RECENT_ENTRIES_KEY) if self._cache else None
        result = await advisory("delete", RECENT_ENTRIES_KEY, call)
        if result.ok:
            logger.info("cache_invalidated", reason=reason)
        return result

    async def create_entry(self, name: str, message: str) -> Entry:
        _validate(name, message)
        entry = await self._store.insert(name, message)
        await self._invalidate("create")
        await self._ledger.record_created()
        logger.info("entry_created", entry_id=entry.id)
        return entry

    async def update_entry(self, entry_id: int, name: str, message: str) -> None:
        _validate(name, message)
        if not await self._store.update(entry_id, name, message):
            raise NotFoundError(entry_id)
        await self._invalidate("update")
        logger.info("entry_updated", entry_id=entry_id)

    async def delete_entry(self, entry_id: int) -> None:
        if not await self._store.delete(entry_id):
            raise NotFoundError(entry_id)
        await self._invalidate("delete")
        await self._ledger.record_deleted()
        logger.info("entry_deleted", entry_id=entry_id)

    async def read_stats(self) -> StatsReport:
        total = await self._store.count()
        cache_available = await self._cache.ping() if self._cache else False
        return StatsReport(
            total_entries_db=total,
            total_entries_live=await self._ledger.live_total(),
            total_entries_created=await self._ledger.created_total(),
            cache_available=cache_available,
        )

    async def read_health(self) -> HealthReport:
        sample = await self._monitor.sample()
        return HealthReport.from_sample(sample)
