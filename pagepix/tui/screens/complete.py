"""
Complete view: conversion summary and the converted pages.
"""

from __future__ import annotations

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Static

from pagepix.app.formatting import format_file_size
from pagepix.models import ConversionProgress, ConversionResult
from pagepix.tui.screens.thumbnails import ThumbnailGrid


def summarize(filename: str, result: ConversionResult) -> str:
    pages = "page" if result.page_count == 1 else "pages"
    return (
        f"{filename}\n"
        f"{result.page_count} {pages} · {result.format.value.upper()} · "
        f"{format_file_size(result.total_size)}"
    )


class CompleteView(Container):
    """Summary, page grid, and open-folder and convert-another actions."""

    def compose(self) -> ComposeResult:
        yield Static("Conversion complete", classes="title")
        yield Static("", id="complete-summary")
        yield Static("", id="complete-output", classes="muted")
        yield ThumbnailGrid(id="complete-thumbnails")
        with Horizontal(classes="row"):
            yield Button("Open Folder", id="open-folder", classes="-primary")
            yield Button("Convert Another (o)", id="convert-another")

    def show_result(
        self,
        filename: str,
        result: ConversionResult,
        pages: Optional[list[ConversionProgress]] = None,
    ) -> None:
        self.query_one("#complete-summary", Static).update(summarize(filename, result))
        self.query_one("#complete-output", Static).update(f"Saved to {result.output_dir}")
        self.query_one("#complete-thumbnails", ThumbnailGrid).show(pages or [], result.page_count)
