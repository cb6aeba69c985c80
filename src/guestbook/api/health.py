from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    database: str
    cache: str
    db_row_count: int | None = None
    time: datetime
    uptime_seconds: float
    metrics: dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Live store and cache check plus current metric values."""
    report = await request.app.state.entry_service.read_health()
    metrics = getattr(request.app.state, "metrics", None)
    if metrics:
        stats = metrics.get_stats()
        uptime = stats.pop("uptime_seconds", 0.0)
    else:
        stats = {}
        uptime = 0.0

    return HealthResponse(
        **report.model_dump(),
        uptime_seconds=uptime,
        metrics=stats,
    )
