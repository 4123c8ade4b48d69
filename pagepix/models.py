"""
Shared Models
=============
Enums and backend wire payloads shared by the session layer and the
render backend. Wire keys are camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Backend event names
PROGRESS_EVENT = "conversion-progress"
COMPLETE_EVENT = "conversion-complete"
ERROR_EVENT = "conversion-error"


class ImageFormat(str, Enum):
    """Output image formats supported by the render backend."""

    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else self.value


class NamingPattern(str, Enum):
    """Output filename templates."""

    FILENAME_PAGE_PADDED = "filename_page_padded"
    FILENAME_NUMBER = "filename_number"
    PAGE_PADDED = "page_padded"
    NUMBER_ONLY = "number_only"

    @property
    def label(self) -> str:
        """Example filename for a document called ``report``."""
        return NAMING_PATTERN_LABELS[self]

    @property
    def template(self) -> str:
        return NAMING_PATTERN_TEMPLATES[self]


NAMING_PATTERN_LABELS = {
    NamingPattern.FILENAME_PAGE_PADDED: "report_page_001",
    NamingPattern.FILENAME_NUMBER: "report_1",
    NamingPattern.PAGE_PADDED: "page_001",
    NamingPattern.NUMBER_ONLY: "001",
}

NAMING_PATTERN_TEMPLATES = {
    NamingPattern.FILENAME_PAGE_PADDED: "<name>_page_NNN",
    NamingPattern.FILENAME_NUMBER: "<name>_N",
    NamingPattern.PAGE_PADDED: "page_NNN",
    NamingPattern.NUMBER_ONLY: "NNN",
}


def _require(payload: Any, key: str) -> Any:
    if not isinstance(payload, dict):
        raise ValueError(f"Expected an object payload, got {type(payload).__name__}")
    if key not in payload:
        raise ValueError(f"Payload is missing {key!r}")
    return payload[key]


def _require_int(payload: Any, key: str) -> int:
    value = _require(payload, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key!r} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class ConversionProgress:
    """One completed page as reported by the backend."""

    current_page: int
    total_pages: int
    thumbnail_base64: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> "ConversionProgress":
        current_page = _require_int(payload, "currentPage")
        total_pages = _require_int(payload, "totalPages")
        return cls(
            current_page=current_page,
            total_pages=total_pages,
            thumbnail_base64=payload.get("thumbnailBase64") or "",
        )

    def to_payload(self) -> dict:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "thumbnailBase64": self.thumbnail_base64,
        }


@dataclass(frozen=True)
class ConversionResult:
    """Terminal success payload."""

    output_dir: str
    total_size: int
    page_count: int
    format: ImageFormat

    @classmethod
    def from_payload(cls, payload: dict) -> "ConversionResult":
        return cls(
            output_dir=str(_require(payload, "outputDir")),
            total_size=_require_int(payload, "totalSize"),
            page_count=_require_int(payload, "pageCount"),
            format=ImageFormat(_require(payload, "format")),
        )

    def to_payload(self) -> dict:
        return {
            "outputDir": self.output_dir,
            "totalSize": self.total_size,
            "pageCount": self.page_count,
            "format": self.format.value,
        }


@dataclass(frozen=True)
class ConversionError:
    """Terminal failure payload."""

    message: str

    @classmethod
    def from_payload(cls, payload: dict) -> "ConversionError":
        return cls(message=str(_require(payload, "message")))

    def to_payload(self) -> dict:
        return {"message": self.message}
