"""
Render Backend Boundary
=======================
Request type and abstract backend shared by every renderer.

A backend accepts one conversion request at a time and reports back
through named events:

    conversion-progress  one payload per rendered page
    conversion-complete  exactly one terminal success payload
    conversion-error     exactly one terminal failure payload

Payloads are plain dicts with camelCase keys (see pagepix.models).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from pagepix.models import (
    COMPLETE_EVENT,
    ERROR_EVENT,
    PROGRESS_EVENT,
    ImageFormat,
    NamingPattern,
)
from pagepix.subscriptions import ListenerRegistry, Subscription

logger = logging.getLogger(__name__)

EVENT_NAMES = (PROGRESS_EVENT, COMPLETE_EVENT, ERROR_EVENT)

EventListener = Callable[[dict], None]


@dataclass(frozen=True)
class ConversionRequest:
    """
    Everything the backend needs to run one conversion.

    Attributes:
        pdf_path: Absolute path of the source PDF
        format: Output image format
        quality: Encoder quality for lossy formats
        output_directory: Output root; empty means alongside the source
        naming_pattern: Output filename template
        page_range: Page selection such as ``1-3,7``; empty means all pages
    """

    pdf_path: str
    format: ImageFormat
    quality: int
    output_directory: str = ""
    naming_pattern: NamingPattern = NamingPattern.FILENAME_PAGE_PADDED
    page_range: str = ""


class RenderBackend(ABC):
    """
    Abstract render backend.

    Subclasses implement convert(), cancel() and open_folder() and report
    through emit(). Listeners may be called from a worker thread.
    """

    def __init__(self):
        self._registries: dict[str, ListenerRegistry[EventListener]] = {
            name: ListenerRegistry() for name in EVENT_NAMES
        }

    def listen(self, event: str, listener: EventListener) -> Subscription:
        """
        Register a listener for one event name.

        Args:
            event: One of EVENT_NAMES
            listener: Called with the event payload

        Returns:
            Subscription handle; release() detaches the listener

        Raises:
            ValueError: If the event name is unknown
        """
        if event not in self._registries:
            raise ValueError(f"Unknown backend event: {event}")
        return self._registries[event].subscribe(listener)

    def emit(self, event: str, payload: dict) -> int:
        """Deliver ``payload`` to the listeners of ``event``."""
        delivered = self._registries[event].notify(payload)
        if delivered == 0:
            logger.debug("No listener for %s", event)
        return delivered

    @abstractmethod
    def convert(self, request: ConversionRequest) -> None:
        """
        Start a conversion.

        Raises:
            BackendError: If the request is rejected before any work starts
        """
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Request cancellation of the running conversion (best-effort)."""
        pass

    @abstractmethod
    def open_folder(self, path: str) -> None:
        """
        Reveal a directory in the host file manager.

        Raises:
            BackendError: If the folder could not be opened
        """
        pass
