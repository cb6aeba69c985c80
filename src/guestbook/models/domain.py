from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

NAME_MAX_LENGTH = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entry(BaseModel):
    """A stored guestbook entry. ``id`` and ``created_at`` come from the store."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    message: str
    created_at: datetime


class RecentEntries(BaseModel):
    entries: list[Entry] = Field(default_factory=list)
    cache_hit: bool = False


class HealthSample(BaseModel):
    """One observation of store and cache liveness. Never persisted."""

    model_config = ConfigDict(frozen=True)

    db_row_count: int | None = None
    db_up: bool = False
    cache_up: bool = False
    sampled_at: datetime = Field(default_factory=_utcnow)


class StatsReport(BaseModel):
    # Authoritative, from COUNT(*) on the store.
    total_entries_db: int
    # Advisory, from cache counters; None when absent or cache unavailable.
    total_entries_live: int | None = None
    total_entries_created: int | None = None
    cache_available: bool = False


class HealthReport(BaseModel):
    status: str
    database: str
    cache: str
    db_row_count: int | None = None
    time: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_sample(cls, sample: HealthSample) -> HealthReport:
        return cls(
            status="healthy" if sample.db_up else "degraded",
            database="healthy" if sample.db_up else "unhealthy",
            cache="healthy" if sample.cache_up else "unhealthy",
            db_row_count=sample.db_row_count,
            time=sample.sampled_at,
        )
