"""
Application Settings
====================
Persisted user preferences with compiled-in defaults and partial-patch updates.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any

from pagepix.errors import StorageError
from pagepix.models import ImageFormat, NamingPattern
from pagepix.storage import KeyValueStore
from pagepix.ui.theme import ThemeMode, is_hex_color

logger = logging.getLogger(__name__)

SETTINGS_KEY = "pagepix-settings"


@dataclass(frozen=True)
class Settings:
    """
    User preferences.

    Attributes:
        format: Output image format
        jpeg_quality: JPEG quality (10-100 in the UI, not enforced here)
        webp_quality: WebP quality (10-100 in the UI, not enforced here)
        output_directory: Output root; empty means alongside the source PDF
        naming_pattern: Output filename template
        theme: Theme preference, mirrored by the theme resolver
        auto_open_folder: Open the output folder when a conversion completes
        accent_color: Hex accent color driving the derived palette
    """

    format: ImageFormat = ImageFormat.PNG
    jpeg_quality: int = 85
    webp_quality: int = 80
    output_directory: str = ""
    naming_pattern: NamingPattern = NamingPattern.FILENAME_PAGE_PADDED
    theme: ThemeMode = ThemeMode.SYSTEM
    auto_open_folder: bool = False
    accent_color: str = "#3B82F6"

    @property
    def quality(self) -> int:
        """Quality forwarded to the backend for the current format."""
        if self.format is ImageFormat.JPEG:
            return self.jpeg_quality
        return self.webp_quality

    def merged(self, patch: dict[str, Any]) -> "Settings":
        """
        Return a copy with ``patch`` applied field by field.

        Enum strings are converted when they name a member; any other value
        is kept as given. Validation belongs to the settings view and to
        loading.

        Raises:
            ValueError: If a key is not a settings field
        """
        return replace(self, **{key: _accept(key, value) for key, value in patch.items()})

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """
        Build settings from a stored blob, merged over defaults.

        Unknown keys are ignored; a field with an unusable value keeps its
        default so one bad field never discards the rest.
        """
        values = {}
        for name in _FIELD_NAMES:
            if name not in data:
                continue
            try:
                values[name] = _coerce(name, data[name])
            except ValueError as e:
                logger.warning("Ignoring stored setting %s: %s", name, e)
        return replace(DEFAULT_SETTINGS, **values)

    def to_dict(self) -> dict:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data


DEFAULT_SETTINGS = Settings()

_FIELD_NAMES = tuple(f.name for f in fields(Settings))
_ENUM_FIELDS = {
    "format": ImageFormat,
    "naming_pattern": NamingPattern,
    "theme": ThemeMode,
}
_INT_FIELDS = {"jpeg_quality", "webp_quality"}


def _accept(name: str, value: Any) -> Any:
    if name not in _FIELD_NAMES:
        raise ValueError(f"Unknown setting: {name}")
    if name in _ENUM_FIELDS:
        try:
            return _ENUM_FIELDS[name](value)
        except ValueError:
            logger.warning("Keeping unrecognised %s value %r", name, value)
    return value


def _coerce(name: str, value: Any) -> Any:
    if name not in _FIELD_NAMES:
        raise ValueError(f"Unknown setting: {name}")

    if name in _ENUM_FIELDS:
        return _ENUM_FIELDS[name](value)

    if name in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        return value

    if name == "auto_open_folder":
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be a boolean, got {value!r}")
        return value

    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    if name == "accent_color" and not is_hex_color(value):
        raise ValueError(f"{name} must be a hex color, got {value!r}")
    return value


class SettingsStore:
    """
    Loads, patches and persists the process-wide Settings.

    Persistence faults are logged and never raised: the in-memory copy
    stays authoritative for the rest of the session.

    Example:
        store = SettingsStore(SQLiteKeyValueStore(config.db_path))
        store.load()
        store.update(format="jpeg", jpeg_quality=90)
    """

    def __init__(self, storage: KeyValueStore):
        self._storage = storage
        self._settings = DEFAULT_SETTINGS

    @property
    def settings(self) -> Settings:
        return self._settings

    def load(self) -> Settings:
        """
        Read persisted settings merged over defaults.

        Returns:
            Loaded settings, or defaults when storage is missing or corrupt
        """
        self._settings = DEFAULT_SETTINGS
        try:
            raw = self._storage.get(SETTINGS_KEY)
        except StorageError as e:
            logger.warning("Could not read settings, using defaults: %s", e)
            return self._settings

        if not raw:
            return self._settings

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Stored settings are not valid JSON, using defaults: %s", e)
            return self._settings

        if not isinstance(data, dict):
            logger.warning("Stored settings are not an object, using defaults")
            return self._settings

        self._settings = Settings.from_dict(data)
        return self._settings

    def update(self, **patch: Any) -> Settings:
        """
        Apply a shallow patch and persist the result before returning.

        Args:
            **patch: Settings fields to override

        Returns:
            The updated settings

        Raises:
            ValueError: If the patch names an unknown field
        """
        self._settings = self._settings.merged(patch)
        self._save()
        return self._settings

    def _save(self) -> None:
        try:
            self._storage.set(SETTINGS_KEY, json.dumps(self._settings.to_dict(), default=str))
        except StorageError as e:
            logger.warning("Could not persist settings: %s", e)
