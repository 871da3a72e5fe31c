"""
Adapters for the marshal check-in service.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteEventStore

__all__ = ["SQLiteEventStore"]
