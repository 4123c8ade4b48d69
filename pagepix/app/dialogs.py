"""
Dialog Service
==============
File and directory pickers as seen by the controller. Every method
resolves to a path, or None when the user dismisses the dialog.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class DialogService(ABC):
    """Abstract dialog service; the TUI provides the modal implementation."""

    @abstractmethod
    async def pick_pdf(self) -> Optional[Path]:
        """Ask for one ``.pdf`` file."""
        pass

    @abstractmethod
    async def pick_directory(self) -> Optional[Path]:
        """Ask for one directory."""
        pass


class NullDialogs(DialogService):
    """Dialog service for headless runs; every dialog is dismissed."""

    async def pick_pdf(self) -> Optional[Path]:
        return None

    async def pick_directory(self) -> Optional[Path]:
        return None
