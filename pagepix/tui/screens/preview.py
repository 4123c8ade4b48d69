"""
Page preview modal.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Static

from pagepix.models import ConversionProgress
from pagepix.tui.screens.thumbnails import thumbnail_renderable
from pagepix.tui.styles import PREVIEW_CSS

# Space taken by the border, title and buttons around the image
CHROME_COLS = 8
CHROME_ROWS = 10


class PreviewScreen(ModalScreen[None]):
    """One page thumbnail at full size. Left/Right step through pages, Esc closes."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("left", "previous", "Previous"),
        ("right", "next", "Next"),
    ]

    CSS = PREVIEW_CSS

    def __init__(self, pages: list[ConversionProgress], index: int = 0) -> None:
        super().__init__()
        self.pages = list(pages)
        self.index = max(0, min(index, len(self.pages) - 1))

    @property
    def current(self) -> ConversionProgress:
        return self.pages[self.index]

    def compose(self) -> ComposeResult:
        with Container(id="preview-root"):
            yield Static("", id="preview-title")
            yield Static("", id="preview-image")
            with Horizontal(id="preview-actions"):
                yield Button("< Prev", id="preview-previous")
                yield Button("Next >", id="preview-next")
                yield Button("Close", id="preview-close", classes="-primary")

    def on_mount(self) -> None:
        self._show()
        self.query_one("#preview-close", Button).focus()

    def on_resize(self) -> None:
        self._show()

    def _show(self) -> None:
        if not self.pages:
            return
        page = self.current
        self.query_one("#preview-title", Static).update(
            f"Page {page.current_page}  ·  {self.index + 1} of {len(self.pages)}"
        )
        size = self.app.size
        self.query_one("#preview-image", Static).update(
            thumbnail_renderable(
                page.thumbnail_base64,
                max(1, size.width - CHROME_COLS),
                max(1, size.height - CHROME_ROWS),
                placeholder=f"No preview for page {page.current_page}",
            )
        )
        self.query_one("#preview-previous", Button).disabled = self.index == 0
        self.query_one("#preview-next", Button).disabled = self.index >= len(self.pages) - 1

    def action_previous(self) -> None:
        if self.index > 0:
            self.index -= 1
            self._show()

    def action_next(self) -> None:
        if self.index < len(self.pages) - 1:
            self.index += 1
            self._show()

    def action_close(self) -> None:
        self.dismiss(None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        button_id = event.button.id
        if button_id == "preview-previous":
            self.action_previous()
        elif button_id == "preview-next":
            self.action_next()
        else:
            self.action_close()
