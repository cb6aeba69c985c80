from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from guestbook import __version__
from guestbook.api.errors import register_error_handlers
from guestbook.api.health import router as health_router
from guestbook.api.metrics import record_request_metrics
from guestbook.api.metrics import router as metrics_router
from guestbook.api.router import api_router
from guestbook.cache.redis_cache import RedisCache
from guestbook.config import Settings, get_settings
from guestbook.logging import setup_logging
from guestbook.observability.metrics import GuestbookMetrics
from guestbook.service.entries import EntryService
from guestbook.service.monitor import HealthMonitor
from guestbook.store.factory import create_entry_store

logger = structlog.get_logger()


async def create_cache(settings: Settings) -> RedisCache | None:
    """Build the Redis cache. An unreachable Redis is logged, not fatal."""
    if not settings.cache_enabled:
        logger.info("cache_disabled")
        return None
    cache = RedisCache.from_url(
        settings.redis_url, socket_timeout=settings.redis_socket_timeout_seconds
    )
    if await cache.ping():
        logger.info("cache_connected", url=settings.redis_url.split("@")[-1])
    else:
        logger.warning("cache_unavailable", url=settings.redis_url.split("@")[-1])
    return cache


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = await create_entry_store(settings)
        cache: RedisCache | None = None
        monitor: HealthMonitor | None = None
        try:
            cache = await create_cache(settings)
            metrics = GuestbookMetrics()

            monitor = HealthMonitor(
                store,
                cache,
                metrics,
                interval_seconds=settings.health_interval_seconds,
                probe_timeout_seconds=settings.health_probe_timeout_seconds,
            )
            entry_service = EntryService(
                store,
                cache,
                metrics,
                monitor=monitor,
                ttl_seconds=settings.cache_ttl_seconds,
                recent_limit=settings.recent_limit,
            )

            app.state.settings = settings
            app.state.store = store
            app.state.cache = cache
            app.state.metrics = metrics
            app.state.monitor = monitor
            app.state.entry_service = entry_service

            monitor.start()
            logger.info("guestbook_started", store=store.backend_type, cache=cache is not None)

            yield
        finally:
            if monitor is not None:
                await monitor.stop()
            if cache is not None:
                await cache.close()
            await store.close()
            logger.info("guestbook_stopped")

    app = FastAPI(
        title="Guestbook",
        version=__version__,
        description="Guestbook entries on SQL with a cache-aside Redis snapshot and Prometheus metrics",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Cache"],
    )
    app.middleware("http")(record_request_metrics)
    register_error_handlers(app)
    app.include_router(api_router, prefix="/api")
    app.include_router(health_router, include_in_schema=False)
    app.include_router(metrics_router)

    return app
