from __future__ import annotations

from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Store
    database_url: str = "sqlite+aiosqlite:///./guestbook.db"
    db_connect_attempts: int = 30
    db_connect_wait_seconds: float = 2.0

    # Cache
    cache_enabled: bool = True
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout_seconds: float = 5.0
    cache_ttl_seconds: int = 300
    recent_limit: int = 100

    # Health monitor
    health_interval_seconds: float = 15.0
    health_probe_timeout_seconds: float = 5.0

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8080
    log_level: str = "INFO"
    cors_allow_origins: list[str] = ["*"]

    @field_validator("recent_limit")
    @classmethod
    def check_recent_limit(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("recent_limit must be between 1 and 100")
        return v


def get_settings() -> Settings:
    return Settings()
