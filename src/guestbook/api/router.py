from __future__ import annotations

from fastapi import APIRouter

from guestbook.api.entries import router as entries_router
from guestbook.api.health import router as health_router
from guestbook.api.stats import router as stats_router

api_router = APIRouter()
api_router.include_router(entries_router, tags=["entries"])
api_router.include_router(stats_router, tags=["stats"])
api_router.include_router(health_router, tags=["health"])
