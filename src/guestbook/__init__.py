"""Guestbook entry service with a cache-aside Redis layer in front of SQL."""

__version__ = "0.1.0"
