"""
Port interfaces for the marshal check-in service.

This module defines the port interfaces (Protocols) between the
feature layer and the storage adapters.
"""

from .repository import EventStorePort

__all__ = ["EventStorePort"]
