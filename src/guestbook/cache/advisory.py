from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

import structlog

from guestbook.errors import CacheError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AdvisoryResult:
    """Outcome of a best-effort cache side call.

    Callers log it and move on; it never changes the outcome of the
    store operation that triggered it.
    """

    operation: str
    key: str
    ok: bool
    value: Any = None
    error: str | None = None


async def advisory(operation: str, key: str, call: Awaitable[Any] | None) -> AdvisoryResult:
    """Await ``call`` and fold any ``CacheError`` into the result.

    ``call`` is None when no cache is configured; that is reported as a
    skipped (not ok) operation without logging a warning.
    """
    if call is None:
        return AdvisoryResult(operation=operation, key=key, ok=False, error="cache disabled")
    try:
        value = await call
    except CacheError as e:
        logger.warning("cache_advisory_failed", operation=operation, key=key, error=str(e))
        return AdvisoryResult(operation=operation, key=key, ok=False, error=str(e))
    return AdvisoryResult(operation=operation, key=key, ok=True, value=value)
