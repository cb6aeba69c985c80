from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    delete,
    func,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from guestbook.errors import StoreError
from guestbook.models.domain import NAME_MAX_LENGTH, Entry

logger = structlog.get_logger()

metadata = MetaData()

entries = Table(
    "entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(NAME_MAX_LENGTH), nullable=False),
    Column("message", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

_ENTRY_COLUMNS = (entries.c.id, entries.c.name, entries.c.message, entries.c.created_at)

# Largest id each backend can bind for an INTEGER primary key.
_MAX_ENTRY_ID = {"sqlite": 2**63 - 1, "postgres": 2**31 - 1}


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive CURRENT_TIMESTAMP values, which are UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _row_to_entry(row) -> Entry:
    return Entry(
        id=row.id,
        name=row.name,
        message=row.message,
        created_at=_as_utc(row.created_at),
    )


class SqlEntryStore:
    """Entry store on SQLAlchemy async (PostgreSQL via asyncpg, SQLite via aiosqlite)."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._engine: AsyncEngine | None = None

    async def connect(self) -> None:
        self._engine = create_async_engine(self._url, echo=False, pool_pre_ping=True)
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            await self._engine.dispose()
            self._engine = None
            raise StoreError(f"Could not connect to database: {e}") from e
        logger.info("store_connected", backend=self.backend_type, url=self._url.split("@")[-1])

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
            self._engine = None

    async def init_schema(self) -> None:
        assert self._engine is not None
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            await self.close()
            raise StoreError(f"Could not create schema: {e}") from e
        logger.info("store_schema_ready")

    async def insert(self, name: str, message: str) -> Entry:
        assert self._engine is not None
        stmt = insert(entries).values(name=name, message=message).returning(*_ENTRY_COLUMNS)
        try:
            async with self._engine.begin() as conn:
                row = (await conn.execute(stmt)).one()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Insert failed: {e}") from e
        return _row_to_entry(row)

    def _valid_id(self, entry_id: int) -> bool:
        return 1 <= entry_id <= _MAX_ENTRY_ID[self.backend_type]

    async def update(self, entry_id: int, name: str, message: str) -> bool:
        assert self._engine is not None
        if not self._valid_id(entry_id):
            return False
        stmt = (
            update(entries)
            .where(entries.c.id == entry_id)
            .values(name=name, message=message)
        )
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Update failed: {e}") from e
        return result.rowcount > 0

    async def delete(self, entry_id: int) -> bool:
        assert self._engine is not None
        if not self._valid_id(entry_id):
            return False
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(delete(entries).where(entries.c.id == entry_id))
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Delete failed: {e}") from e
        return result.rowcount > 0

    async def list_recent(self, limit: int = 100) -> list[Entry]:
        assert self._engine is not None
        stmt = (
            select(*_ENTRY_COLUMNS)
            .order_by(entries.c.created_at.desc(), entries.c.id.desc())
            .limit(limit)
        )
        try:
            async with self._engine.connect() as conn:
                rows = (await conn.execute(stmt)).all()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Query failed: {e}") from e
        return [_row_to_entry(row) for row in rows]

    async def count(self) -> int:
        assert self._engine is not None
        try:
            async with self._engine.connect() as conn:
                value = (await conn.execute(select(func.count()).select_from(entries))).scalar_one()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Count failed: {e}") from e
        return int(value)

    async def ping(self) -> bool:
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("store_ping_failed", error=str(e))
            return False
        return True

    @property
    def backend_type(self) -> str:
        if self._url.startswith("sqlite"):
            return "sqlite"
        return "postgres"
