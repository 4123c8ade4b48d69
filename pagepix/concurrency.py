"""
Concurrency Module
===================
Cooperative cancellation for the render worker thread.
"""

from __future__ import annotations

import threading

from pagepix.errors import ConversionCancelledError


class CancellationToken:
    """
    Token for cooperative task cancellation.

    The render worker checks is_cancelled() between pages and exits
    gracefully; the UI thread only ever calls cancel().
    """

    def __init__(self):
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._cancelled.set()

    def is_cancelled(self) -> bool:
        """Check if cancellation was requested."""
        return self._cancelled.is_set()

    def reset(self) -> None:
        """Reset the token for reuse."""
        self._cancelled.clear()

    def raise_if_cancelled(self) -> None:
        """Raise ConversionCancelledError if cancellation was requested."""
        if self.is_cancelled():
            raise ConversionCancelledError()
