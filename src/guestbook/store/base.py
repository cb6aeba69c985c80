from __future__ import annotations

from typing import Protocol

from guestbook.models.domain import Entry


class EntryStore(Protocol):
    """Authoritative persistence for guestbook entries.

    Every method raises ``StoreError`` on I/O failure. ``update`` and ``delete``
    return False when no row matched.
    """

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def init_schema(self) -> None: ...

    async def insert(self, name: str, message: str) -> Entry: ...

    async def update(self, entry_id: int, name: str, message: str) -> bool: ...

    async def delete(self, entry_id: int) -> bool: ...

    async def list_recent(self, limit: int = 100) -> list[Entry]: ...

    async def count(self) -> int: ...

    async def ping(self) -> bool: ...

    @property
    def backend_type(self) -> str: ...
