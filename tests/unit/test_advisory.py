from __future__ import annotations

import pytest

from guestbook.cache.advisory import advisory
from guestbook.errors import CacheError


async def _ok() -> int:
    return 7


async def _fail() -> int:
    raise CacheError("DEL entries:all failed: connection refused")


@pytest.mark.asyncio
async def test_success_carries_value() -> None:
    result = await advisory("incr", "n", _ok())
    assert result.ok
    assert result.value == 7
    assert result.error is None


@pytest.mark.asyncio
async def test_cache_error_is_folded_into_result() -> None:
    result = await advisory("delete", "entries:all", _fail())
    assert not result.ok
    assert "connection refused" in result.error


@pytest.mark.asyncio
async def test_missing_cache_is_skipped() -> None:
    result = await advisory("delete", "entries:all", None)
    assert not result.ok
    assert result.error == "cache disabled"


@pytest.mark.asyncio
async def test_other_errors_propagate() -> None:
    async def boom() -> None:
        raise RuntimeError("bug")

    with pytest.raises(RuntimeError, match="bug"):
        await advisory("set", "k", boom())
