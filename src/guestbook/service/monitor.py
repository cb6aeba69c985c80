from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import Any, TypeVar

import structlog

from guestbook.cache.redis_cache import RedisCache
from guestbook.errors import StoreError
from guestbook.models.domain import HealthSample
from guestbook.observability.metrics import GuestbookMetrics
from guestbook.store.base import EntryStore

logger = structlog.get_logger()

T = TypeVar("T")


class HealthMonitor:
    """Samples store and cache health on a fixed interval and publishes gauges.

    Runs as a single asyncio task. The next tick is scheduled only after the
    previous one returns, so a slow tick stretches the period instead of
    overlapping. Store and cache calls are never cancelled mid-flight: a call
    that outlives the timeout is reported as failed and left to finish in the
    background, and ``stop()`` waits for the current tick instead of
    cancelling it.
    """

    def __init__(
        self,
        store: EntryStore,
        cache: RedisCache | None,
        metrics: GuestbookMetrics,
        interval_seconds: float = 15.0,
        probe_timeout_seconds: float = 5.0,
    ) -> None:
        self._store = store
        self._cache = cache
        self._metrics = metrics
        self._interval = interval_seconds
        self._timeout = probe_timeout_seconds
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()
        self._pending: set[asyncio.Future[Any]] = set()
        self._last_sample: HealthSample | None = None

    @property
    def last_sample(self) -> HealthSample | None:
        return self._last_sample

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _forget(self, call: asyncio.Future[Any]) -> None:
        self._pending.discard(call)
        if not call.cancelled():
            call.exception()

    async def _bounded(self, coro: Awaitable[T]) -> T:
        """Await ``coro`` for at most the per-call timeout without cancelling it."""
        call = asyncio.ensure_future(coro)
        self._pending.add(call)
        call.add_done_callback(self._forget)
        done, _ = await asyncio.wait({call}, timeout=self._timeout)
        if not done:
            raise asyncio.TimeoutError
        return call.result()

    async def _count(self) -> int | None:
        try:
            return await self._bounded(self._store.count())
        except (StoreError, asyncio.TimeoutError) as e:
            logger.warning("health_count_failed", error=str(e) or type(e).__name__)
            return None

    async def _ping_store(self) -> bool:
        try:
            return await self._bounded(self._store.ping())
        except (StoreError, asyncio.TimeoutError):
            return False

    async def _ping_cache(self) -> bool:
        if self._cache is None:
            return False
        try:
            return await self._bounded(self._cache.ping())
        except asyncio.TimeoutError:
            return False

    async def sample(self) -> HealthSample:
        return HealthSample(
            db_row_count=await self._count(),
            db_up=await self._ping_store(),
            cache_up=await self._ping_cache(),
        )

    async def tick(self) -> HealthSample:
        sample = await self.sample()
        if sample.db_row_count is not None:
            self._metrics.db_entries.set(sample.db_row_count)
        self._metrics.db_up.set(1 if sample.db_up else 0)
        self._metrics.redis_up.set(1 if sample.cache_up else 0)
        self._last_sample = sample
        logger.debug(
            "health_sampled",
            db_row_count=sample.db_row_count,
            db_up=sample.db_up,
            cache_up=sample.cache_up,
        )
        return sample

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("health_tick_failed")
            try:
                await asyncio.wait_for(self._stopping.wait(), self._interval)
            except asyncio.TimeoutError:
                pass

    def start(self) -> None:
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="guestbook-health-monitor")
        logger.info("health_monitor_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        """Signal the loop and wait for the current tick to finish.

        A tick makes three bounded calls, so it ends within three call
        timeouts. The task is cancelled only if it overruns that. Calls that
        already timed out get one more call timeout to drain before the
        store and cache are closed underneath them.
        """
        self._stopping.set()
        if self._task is not None:
            task, self._task = self._task, None
            done, _ = await asyncio.wait({task}, timeout=self._timeout * 3 + 1.0)
            if not done:
                logger.warning("health_monitor_cancelled")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            logger.info("health_monitor_stopped")
        if self._pending:
            await asyncio.wait(set(self._pending), timeout=self._timeout)
