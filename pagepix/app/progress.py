"""
Progress Aggregation
====================
Accumulates per-page progress events for the active session.
"""

from __future__ import annotations

from pagepix.models import ConversionProgress


class ProgressAggregator:
    """
    Ordered, de-duplicated sequence of page events.

    Page numbers must strictly increase within a session. A repeated or
    out-of-order page is a backend fault: the first write wins and the
    event is dropped. The caller reports the fault.
    """

    def __init__(self):
        self._pages: list[ConversionProgress] = []
        self._total_pages = 0

    def reset(self) -> None:
        self._pages = []
        self._total_pages = 0

    def append(self, event: ConversionProgress) -> bool:
        """
        Record a page.

        The reported total is taken from every event, dropped or not.

        Returns:
            True if accepted, False if discarded as a duplicate/non-increasing page
        """
        self._total_pages = event.total_pages
        if self._pages and event.current_page <= self._pages[-1].current_page:
            return False

        self._pages.append(event)
        return True

    @property
    def last_page(self) -> int:
        """Most recently accepted page number, 0 before any."""
        return self._pages[-1].current_page if self._pages else 0

    @property
    def pages(self) -> list[ConversionProgress]:
        return list(self._pages)

    @property
    def page_numbers(self) -> list[int]:
        return [p.current_page for p in self._pages]

    @property
    def total_pages(self) -> int:
        return self._total_pages

    @property
    def current_count(self) -> int:
        return len(self._pages)

    @property
    def display_total(self) -> int:
        """Total used for display; falls back to the count while unknown."""
        return self._total_pages or self.current_count

    @property
    def percent(self) -> int:
        total = self.display_total
        if total <= 0:
            return 0
        value = int(self.current_count / total * 100 + 0.5)
        return max(0, min(100, value))
