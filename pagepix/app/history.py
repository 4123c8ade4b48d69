"""
Conversion History
==================
Bounded, most-recent-first list of finished conversions.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from pagepix.errors import StorageError
from pagepix.models import ImageFormat
from pagepix.storage import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "pagepix-recent"
MAX_RECENT = 10


@dataclass(frozen=True)
class RecentConversion:
    """Snapshot of a finished conversion."""

    filename: str
    page_count: int
    format: ImageFormat
    timestamp: float
    output_dir: str
    pdf_path: Optional[str] = None

    @property
    def can_rerun(self) -> bool:
        return bool(self.pdf_path)

    def to_dict(self) -> dict:
        data = {
            "filename": self.filename,
            "page_count": self.page_count,
            "format": self.format.value,
            "timestamp": self.timestamp,
            "output_dir": self.output_dir,
        }
        if self.pdf_path:
            data["pdf_path"] = self.pdf_path
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RecentConversion":
        """
        Raises:
            ValueError: If a required field is missing or malformed
        """
        try:
            return cls(
                filename=str(data["filename"]),
                page_count=int(data["page_count"]),
                format=ImageFormat(data["format"]),
                timestamp=float(data["timestamp"]),
                output_dir=str(data["output_dir"]),
                pdf_path=data.get("pdf_path") or None,
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed history entry: {e}") from e


class HistoryStore:
    """
    Persisted list of recent conversions, capped at MAX_RECENT.

    Write failures leave the in-memory list updated and are only logged.
    """

    def __init__(self, storage: KeyValueStore, limit: int = MAX_RECENT):
        self._storage = storage
        self._limit = limit
        self._entries: list[RecentConversion] = []

    @property
    def entries(self) -> list[RecentConversion]:
        return list(self._entries)

    def load(self) -> list[RecentConversion]:
        """
        Read stored entries.

        Returns:
            Stored entries, or an empty list on missing/corrupt data
        """
        self._entries = []
        try:
            raw = self._storage.get(HISTORY_KEY)
        except StorageError as e:
            logger.warning("Could not read history: %s", e)
            return self.entries

        if not raw:
            return self.entries

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Stored history is not valid JSON: %s", e)
            return self.entries

        if not isinstance(data, list):
            logger.warning("Stored history is not a list")
            return self.entries

        for item in data:
            if not isinstance(item, dict):
                logger.warning("Skipping history entry %r", item)
                continue
            try:
                self._entries.append(RecentConversion.from_dict(item))
            except ValueError as e:
                logger.warning("Skipping history entry: %s", e)

        self._entries = self._entries[: self._limit]
        return self.entries

    def add(self, entry: RecentConversion) -> list[RecentConversion]:
        """Prepend ``entry``, drop anything past the cap and persist."""
        self._entries = [entry, *self._entries][: self._limit]
        try:
            self._storage.set(HISTORY_KEY, json.dumps([e.to_dict() for e in self._entries]))
        except StorageError as e:
            logger.warning("Could not persist history, keeping it in memory: %s", e)
        return self.entries

    def clear(self) -> None:
        """Empty the list and delete the persisted key."""
        self._entries = []
        try:
            self._storage.remove(HISTORY_KEY)
        except StorageError as e:
            logger.warning("Could not remove stored history: %s", e)
