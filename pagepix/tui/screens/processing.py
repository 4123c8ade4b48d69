"""
Processing view: page-range confirmation, live progress with page
thumbnails, and failure.
"""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Input, ProgressBar, RichLog, Static

from pagepix.app.events import ProgressEvent
from pagepix.app.session import Converting, Failed, Ready, SessionState
from pagepix.models import ConversionProgress
from pagepix.tui.screens.thumbnails import ThumbnailGrid


class ProcessingView(Container):
    """One panel per session state: Ready, Converting or Failed."""

    def compose(self) -> ComposeResult:
        yield Static("", id="processing-file", classes="title")
        with Vertical(id="ready-panel"):
            yield Static(
                "Pages to convert, e.g. 1-5, 8, 10-12. Leave empty for all pages.",
                classes="muted",
            )
            yield Input(placeholder="All pages", id="page-range-input")
            with Horizontal(classes="row"):
                yield Button("Convert", id="start-conversion", classes="-primary")
                yield Button("Back", id="ready-home")
        with Vertical(id="converting-panel"):
            yield ProgressBar(total=100, show_eta=False, id="progress-bar")
            yield Static("Starting...", id="progress-text")
            yield ThumbnailGrid(id="processing-thumbnails")
            yield RichLog(id="page-log", wrap=True)
            with Horizontal(classes="row"):
                yield Button("Cancel (c)", id="cancel-conversion")
        with Vertical(id="failed-panel"):
            yield Static("Conversion failed", classes="label")
            yield Static("", id="error-message", classes="error")
            with Horizontal(classes="row"):
                yield Button("Try Again", id="retry", classes="-primary")
                yield Button("Home", id="failed-home")

    @property
    def page_range(self) -> str:
        return self.query_one("#page-range-input", Input).value

    def show_state(self, state: SessionState) -> None:
        ready = isinstance(state, Ready)
        converting = isinstance(state, Converting)
        failed = isinstance(state, Failed)

        self.query_one("#ready-panel", Vertical).display = ready
        self.query_one("#converting-panel", Vertical).display = converting
        self.query_one("#failed-panel", Vertical).display = failed

        if not (ready or converting or failed):
            return

        self.query_one("#processing-file", Static).update(state.filename)
        if ready:
            page_input = self.query_one("#page-range-input", Input)
            page_input.value = state.page_range
            page_input.focus()
        elif converting:
            self.query_one("#progress-bar", ProgressBar).update(total=None, progress=0)
            self.query_one("#progress-text", Static).update("Starting...")
            self.query_one("#page-log", RichLog).clear()
            self.query_one("#processing-thumbnails", ThumbnailGrid).reset()
        else:
            self.query_one("#error-message", Static).update(state.message)

    def show_progress(self, event: ProgressEvent) -> None:
        self.query_one("#progress-bar", ProgressBar).update(
            total=event.total, progress=event.current
        )
        self.query_one("#progress-text", Static).update(
            f"Page {event.current} of {event.total}  ({event.percent}%)"
        )
        self.query_one("#page-log", RichLog).write(
            Text.assemble(("done ", "bold green"), f"page {event.page}")
        )
        self.query_one("#processing-thumbnails", ThumbnailGrid).add(
            ConversionProgress(
                current_page=event.page,
                total_pages=event.total,
                thumbnail_base64=event.thumbnail,
            )
        )
