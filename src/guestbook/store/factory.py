from __future__ import annotations

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from guestbook.config import Settings
from guestbook.errors import StoreError
from guestbook.store.base import EntryStore
from guestbook.store.memory import InMemoryEntryStore
from guestbook.store.sql_store import SqlEntryStore

logger = structlog.get_logger()


async def connect_with_retry(
    store: EntryStore, max_attempts: int = 30, wait_seconds: float = 2.0
) -> None:
    """Connect the store, waiting for the database to come up."""
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(wait_seconds),
        retry=retry_if_exception_type(StoreError),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "store_waiting",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
        ),
    ):
        with attempt:
            await store.connect()


async def create_entry_store(settings: Settings) -> EntryStore:
    """Create, connect and bootstrap the entry store named by ``database_url``."""
    store: EntryStore
    if settings.database_url == "memory":
        store = InMemoryEntryStore()
    else:
        store = SqlEntryStore(settings.database_url)

    await connect_with_retry(
        store,
        max_attempts=settings.db_connect_attempts,
        wait_seconds=settings.db_connect_wait_seconds,
    )
    await store.init_schema()
    return store
