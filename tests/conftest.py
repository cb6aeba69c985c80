from __future__ import annotations

from unittest.mock import patch

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from guestbook.cache.redis_cache import RedisCache
from guestbook.observability.metrics import GuestbookMetrics
from guestbook.service.entries import EntryService
from guestbook.service.monitor import HealthMonitor
from guestbook.store.sql_store import SqlEntryStore
from tests.fakes import FakeRedis


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Set environment variables for testing."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'guestbook.db'}")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/15")
    monkeypatch.setenv("CACHE_ENABLED", "true")
    monkeypatch.setenv("DB_CONNECT_ATTEMPTS", "1")
    monkeypatch.setenv("HEALTH_INTERVAL_SECONDS", "3600")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> RedisCache:
    return RedisCache(fake_redis)


@pytest.fixture
def metrics() -> GuestbookMetrics:
    return GuestbookMetrics()


@pytest.fixture
async def sql_store(tmp_path) -> SqlEntryStore:
    store = SqlEntryStore(f"sqlite+aiosqlite:///{tmp_path / 'entries.db'}")
    await store.connect()
    await store.init_schema()
    yield store
    await store.close()


@pytest.fixture
def service(sql_store: SqlEntryStore, cache: RedisCache, metrics: GuestbookMetrics) -> EntryService:
    monitor = HealthMonitor(sql_store, cache, metrics, probe_timeout_seconds=1.0)
    return EntryService(sql_store, cache, metrics, monitor=monitor)


@pytest.fixture
async def app(fake_redis: FakeRedis):
    """Create a test FastAPI app with Redis replaced by the in-process fake."""
    with patch("guestbook.app.RedisCache.from_url", return_value=RedisCache(fake_redis)):
        from guestbook.app import create_app

        test_app = create_app()
        yield test_app


@pytest.fixture
async def client(app) -> AsyncClient:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with LifespanManager(app):
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
