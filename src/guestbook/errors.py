from __future__ import annotations


class GuestbookError(Exception):
    """Base class for errors surfaced by the entry service."""


class ValidationError(GuestbookError):
    """A required field is empty or out of bounds. Not retryable."""


class NotFoundError(GuestbookError):
    """No stored entry matches the requested id."""

    def __init__(self, entry_id: int) -> None:
        super().__init__(f"Entry {entry_id} not found")
        self.entry_id = entry_id


class StoreError(GuestbookError):
    """The authoritative store failed. Transient and safe to retry."""


class CacheError(GuestbookError):
    """The cache failed. Callers treat this as a miss or a no-op."""
