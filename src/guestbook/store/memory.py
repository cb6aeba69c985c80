from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from guestbook.models.domain import Entry


class InMemoryEntryStore:
    """In-memory entry store for development and tests."""

    def __init__(self) -> None:
        self._entries: dict[int, Entry] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def init_schema(self) -> None:
        return None

    async def insert(self, name: str, message: str) -> Entry:
        async with self._lock:
            entry = Entry(
                id=self._next_id,
                name=name,
                message=message,
                created_at=datetime.now(timezone.utc),
            )
            self._entries[entry.id] = entry
            self._next_id += 1
            return entry

    async def update(self, entry_id: int, name: str, message: str) -> bool:
        async with self._lock:
            existing = self._entries.get(entry_id)
            if existing is None:
                return False
            self._entries[entry_id] = existing.model_copy(update={"name": name, "message": message})
            return True

    async def delete(self, entry_id: int) -> bool:
        async with self._lock:
            return self._entries.pop(entry_id, None) is not None

    async def list_recent(self, limit: int = 100) -> list[Entry]:
        ordered = sorted(
            self._entries.values(),
            key=lambda e: (e.created_at, e.id),
            reverse=True,
        )
        return ordered[:limit]

    async def count(self) -> int:
        return len(self._entries)

    async def ping(self) -> bool:
        return True

    @property
    def backend_type(self) -> str:
        return "memory"
