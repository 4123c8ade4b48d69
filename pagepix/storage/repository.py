"""
Repository Pattern Interface
============================
Abstract base class for the durable key-value store.
Enables swapping storage backends (SQLite, in-memory, etc.)
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract string key-value store.

    Implementations:
        - SQLiteKeyValueStore: Local SQLite storage
        - MemoryStore: For testing and headless runs

    Implementations raise StorageError on any backend failure; callers
    decide how to degrade.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            Stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Args:
            key: Storage key
            value: String to store
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Delete a key. Removing an absent key is not an error.

        Args:
            key: Storage key
        """
        pass


class MemoryStore(KeyValueStore):
    """In-memory store; contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
