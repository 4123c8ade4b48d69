"""
Home view: file selection and recent conversions.
"""

from __future__ import annotations

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Input, OptionList, Static

from pagepix.app.formatting import time_ago
from pagepix.app.history import RecentConversion

RECENT_VISIBLE = 5


def describe_recent(entry: RecentConversion, now: Optional[float] = None) -> str:
    pages = "page" if entry.page_count == 1 else "pages"
    label = (
        f"{entry.filename}  ·  {entry.page_count} {pages}  ·  "
        f"{entry.format.value.upper()}  ·  {time_ago(entry.timestamp, now)}"
    )
    if not entry.can_rerun:
        label += "  (source unknown)"
    return label


class HomeView(Container):
    """Landing view: open or paste a PDF, or re-run a recent conversion."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._recent: list[RecentConversion] = []
        self.error_text = ""

    def compose(self) -> ComposeResult:
        yield Static("PagePix", classes="title")
        yield Static("Convert every page of a PDF into an image.", classes="muted")
        with Horizontal(classes="row"):
            yield Input(placeholder="Drop or paste a PDF path and press Enter", id="drop-input")
            yield Button("Browse (o)", id="browse", classes="-primary")
        yield Static("", id="drop-error", classes="error")
        yield Static("Recent", id="recent-label", classes="label")
        yield OptionList(id="recent-list")
        with Horizontal(classes="row", id="recent-actions"):
            yield Button("Clear History", id="clear-recent")

    @property
    def recent_entries(self) -> list[RecentConversion]:
        return list(self._recent)

    def show_error(self, message: str) -> None:
        self.error_text = message
        self.query_one("#drop-error", Static).update(message)

    def clear_input(self) -> None:
        self.query_one("#drop-input", Input).value = ""
        self.show_error("")

    def show_recent(self, entries: list[RecentConversion], now: Optional[float] = None) -> None:
        self._recent = entries[:RECENT_VISIBLE]
        recent_list = self.query_one("#recent-list", OptionList)
        recent_list.clear_options()
        recent_list.add_options([describe_recent(entry, now) for entry in self._recent])

        visible = bool(self._recent)
        self.query_one("#recent-label", Static).display = visible
        recent_list.display = visible
        self.query_one("#recent-actions", Horizontal).display = visible

    def recent_at(self, index: int) -> Optional[RecentConversion]:
        if 0 <= index < len(self._recent):
            return self._recent[index]
        return None
