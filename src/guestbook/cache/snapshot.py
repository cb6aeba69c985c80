from __future__ import annotations

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from guestbook.models.domain import Entry

RECENT_ENTRIES_KEY = "entries:all"

_entries_adapter = TypeAdapter(list[Entry])


def encode_entries(entries: list[Entry]) -> str:
    """Serialize entries to the JSON array stored under ``RECENT_ENTRIES_KEY``."""
    return _entries_adapter.dump_json(entries).decode("utf-8")


def decode_entries(payload: str | bytes) -> list[Entry]:
    """Parse a cached snapshot. Raises ``ValueError`` on a corrupt payload."""
    try:
        return _entries_adapter.validate_json(payload)
    except SchemaError as e:
        raise ValueError(f"Invalid cached snapshot: {e.error_count()} errors") from e
