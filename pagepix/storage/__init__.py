"""
Storage Module
==============
Durable string key-value storage used by the settings, history and theme stores.

Repository Pattern:
    - KeyValueStore: Abstract get/set/remove interface
    - MemoryStore: Process-local implementation (tests, headless runs)
    - SQLiteKeyValueStore: Durable SQLite implementation
"""

from .repository import KeyValueStore, MemoryStore
from .sqlite_store import SQLiteKeyValueStore

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "SQLiteKeyValueStore",
]
