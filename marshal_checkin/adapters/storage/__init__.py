"""
Storage adapters for the marshal check-in service.

This module contains the SQLite event store and the JSON column codec
used at the persistence boundary.
"""

from .sqlite_store import SQLiteEventStore

__all__ = ["SQLiteEventStore"]
