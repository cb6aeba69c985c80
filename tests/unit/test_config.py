from __future__ import annotations

import pytest
from pydantic import ValidationError

from guestbook.config import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("HEALTH_INTERVAL_SECONDS", raising=False)
    monkeypatch.delenv("DB_CONNECT_ATTEMPTS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_url == "sqlite+aiosqlite:///./guestbook.db"
    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.cache_ttl_seconds == 300
    assert settings.recent_limit == 100
    assert settings.health_interval_seconds == 15.0
    assert settings.db_connect_attempts == 30
    assert settings.app_port == 8080


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://guestbook:pw@db:5432/guestbook")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("CACHE_ENABLED", "false")
    settings = Settings(_env_file=None)
    assert settings.database_url.startswith("postgresql+asyncpg://")
    assert settings.redis_url == "redis://cache:6379/1"
    assert settings.cache_ttl_seconds == 60
    assert settings.cache_enabled is False


def test_env_names_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("recent_limit", "25")
    settings = Settings(_env_file=None)
    assert settings.recent_limit == 25


def test_recent_limit_bounded(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECENT_LIMIT", "500")
    with pytest.raises(ValidationError, match="recent_limit"):
        Settings(_env_file=None)
