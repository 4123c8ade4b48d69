"""
Error Handling Module
=====================
Custom exceptions and error codes for PagePix.
Provides consistent error codes and messages for storage and backend faults.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional
from pathlib import Path


class ErrorCode(Enum):
    """Error codes for PagePix."""
    # Source errors (E001-E099)
    E001 = "PDF file not found"
    E002 = "PDF could not be opened"
    E003 = "Page render failed"
    E004 = "Invalid page range"

    # Output errors (E100-E199)
    E100 = "Output directory could not be created"
    E101 = "Image encoding failed"
    E102 = "Unsupported image format"
    E103 = "Folder could not be opened"

    # Storage errors (E200-E299)
    E200 = "Storage read failed"
    E201 = "Storage write failed"

    # Session errors (E400-E499)
    E400 = "Conversion cancelled"
    E401 = "Conversion already running"


@dataclass
class PagePixError(Exception):
    """Base exception for PagePix with error codes."""
    code: ErrorCode
    message: str
    details: Optional[str] = None
    file_path: Optional[Path] = None

    def __str__(self) -> str:
        base = f"[{self.code.name}] {self.code.value}: {self.message}"
        if self.details:
            base += f" ({self.details})"
        if self.file_path:
            base += f" - File: {self.file_path}"
        return base


class StorageError(PagePixError):
    """Error reading or writing the durable key-value store."""
    def __init__(self, message: str, key: str = None, write: bool = False):
        super().__init__(
            code=ErrorCode.E201 if write else ErrorCode.E200,
            message=message,
            details=f"key={key}" if key else None
        )


class BackendError(PagePixError):
    """Error raised by the render backend.

    ``message`` is the human-readable text shown in the failed view.
    """
    def __init__(self, code: ErrorCode, message: str, details: str = None, file_path: Path = None):
        super().__init__(
            code=code,
            message=message,
            details=details,
            file_path=file_path
        )


class PageRangeError(BackendError):
    """Error when a page-range selection cannot be applied."""
    def __init__(self, selection: str, reason: str):
        super().__init__(
            code=ErrorCode.E004,
            message=f"Invalid page range: {reason}",
            details=repr(selection)
        )


class ConversionCancelledError(BackendError):
    """Raised inside the render worker once cancellation is observed."""
    def __init__(self):
        super().__init__(
            code=ErrorCode.E400,
            message="Conversion cancelled"
        )
