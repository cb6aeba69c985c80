from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from guestbook.config import Settings
from guestbook.errors import StoreError
from guestbook.store.factory import connect_with_retry, create_entry_store
from guestbook.store.memory import InMemoryEntryStore
from guestbook.store.sql_store import SqlEntryStore


@pytest.mark.asyncio
async def test_connect_retries_until_database_is_up() -> None:
    store = AsyncMock()
    store.connect.side_effect = [StoreError("refused"), StoreError("refused"), None]
    await connect_with_retry(store, max_attempts=5, wait_seconds=0)
    assert store.connect.call_count == 3


@pytest.mark.asyncio
async def test_connect_gives_up_after_max_attempts() -> None:
    store = AsyncMock()
    store.connect.side_effect = StoreError("refused")
    with pytest.raises(StoreError, match="refused"):
        await connect_with_retry(store, max_attempts=2, wait_seconds=0)
    assert store.connect.call_count == 2


@pytest.mark.asyncio
async def test_connect_does_not_retry_other_errors() -> None:
    store = AsyncMock()
    store.connect.side_effect = ValueError("bad url")
    with pytest.raises(ValueError):
        await connect_with_retry(store, max_attempts=5, wait_seconds=0)
    assert store.connect.call_count == 1


@pytest.mark.asyncio
async def test_create_sql_store(tmp_path) -> None:
    settings = Settings(_env_file=None, database_url=f"sqlite+aiosqlite:///{tmp_path / 'f.db'}")
    store = await create_entry_store(settings)
    try:
        assert isinstance(store, SqlEntryStore)
        assert store.backend_type == "sqlite"
        assert await store.count() == 0
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_create_memory_store() -> None:
    store = await create_entry_store(Settings(_env_file=None, database_url="memory"))
    assert isinstance(store, InMemoryEntryStore)
