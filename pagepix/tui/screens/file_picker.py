"""
File and directory picker modal, and the dialog service built on it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, DirectoryTree, Input, Static

from pagepix.app.dialogs import DialogService
from pagepix.tui.styles import FILE_PICKER_CSS

PDF_SUFFIX = ".pdf"


def normalize_path_input(raw: str) -> str:
    """
    Clean up a pasted path.

    Accepts quoted paths, paths wrapped in parentheses, file:// URIs and
    shell-escaped spaces.
    """
    value = raw.strip()
    if len(value) >= 2 and value.startswith("(") and value.endswith(")"):
        value = value[1:-1]
    value = value.strip().strip("'").strip('"')
    value = value.replace("\\ ", " ")

    if value.startswith("file://"):
        parsed = urlparse(value)
        value = unquote(parsed.path)

    return value


class PDFDirectoryTree(DirectoryTree):
    """Directory tree showing folders and PDF files only."""

    def filter_paths(self, paths):
        return [
            path
            for path in paths
            if not path.name.startswith(".")
            and (path.is_dir() or path.suffix.lower() == PDF_SUFFIX)
        ]


class FolderTree(DirectoryTree):
    """Directory tree showing folders only."""

    def filter_paths(self, paths):
        return [path for path in paths if not path.name.startswith(".") and path.is_dir()]


class FilePickerScreen(ModalScreen[Optional[Path]]):
    """Pick one PDF file (``directory=False``) or one directory."""

    BINDINGS = [
        ("escape", "cancel_picker", "Cancel"),
    ]

    CSS = FILE_PICKER_CSS

    def __init__(self, directory: bool = False, start: Optional[Path] = None) -> None:
        super().__init__()
        self.directory = directory
        self.start = start or Path.home()

    def compose(self) -> ComposeResult:
        title = "Choose Output Folder" if self.directory else "Open PDF"
        placeholder = "/path/to/folder" if self.directory else "/path/to/document.pdf"
        tree_class = FolderTree if self.directory else PDFDirectoryTree

        with Container(id="picker-root"):
            yield Static(title, id="picker-title")
            yield Input(placeholder=placeholder, id="picker-input")
            yield tree_class(str(self.start), id="picker-tree")
            yield Static("", id="picker-error")
            with Horizontal(id="picker-actions"):
                yield Button("Select", id="picker-ok", classes="-primary")
                yield Button("Cancel", id="picker-cancel")

    def _set_error(self, message: str) -> None:
        self.query_one("#picker-error", Static).update(message)

    def _validate(self) -> Optional[Path]:
        raw = self.query_one("#picker-input", Input).value
        if not raw.strip():
            self._set_error("Select a folder." if self.directory else "Select a PDF file.")
            return None

        path = Path(normalize_path_input(raw)).expanduser().resolve()
        if self.directory:
            if not path.is_dir():
                self._set_error(f"Not a folder: {path}")
                return None
            return path

        if not path.is_file():
            self._set_error(f"File not found: {path}")
            return None
        if path.suffix.lower() != PDF_SUFFIX:
            self._set_error("Only PDF files are supported")
            return None
        return path

    def on_directory_tree_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        if self.directory:
            return
        self.query_one("#picker-input", Input).value = str(event.path)
        self._set_error("")

    def on_directory_tree_directory_selected(self, event: DirectoryTree.DirectorySelected) -> None:
        if not self.directory:
            return
        self.query_one("#picker-input", Input).value = str(event.path)
        self._set_error("")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "picker-cancel":
            self.dismiss(None)
        elif event.button.id == "picker-ok":
            self._submit()

    def _submit(self) -> None:
        path = self._validate()
        if path is not None:
            self.dismiss(path)

    def action_cancel_picker(self) -> None:
        self.dismiss(None)


class TUIDialogs(DialogService):
    """
    Dialog service backed by FilePickerScreen.

    Must be awaited from a Textual worker (push_screen_wait).
    """

    def __init__(self, app: App):
        self._app = app

    async def pick_pdf(self) -> Optional[Path]:
        return await self._app.push_screen_wait(FilePickerScreen(directory=False))

    async def pick_directory(self) -> Optional[Path]:
        return await self._app.push_screen_wait(FilePickerScreen(directory=True))
