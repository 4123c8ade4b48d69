"""
Page thumbnails: decoding, terminal rendering and the page grid.

Thumbnails arrive as base64 PNG on each progress event and are drawn with
half-block characters, two pixel rows per terminal cell.
"""

from __future__ import annotations

import base64
import io
import logging
from typing import Optional

from PIL import Image
from rich.console import Group, RenderableType
from rich.text import Text
from rich_pixels import Pixels
from textual.app import ComposeResult
from textual.containers import Grid, VerticalScroll
from textual.message import Message
from textual.widgets import Static

from pagepix.models import ConversionProgress

logger = logging.getLogger(__name__)

TILE_COLS = 12
TILE_ROWS = 8


def decode_thumbnail(data: str) -> Optional[Image.Image]:
    """Image from a base64 PNG, or None when empty or undecodable."""
    if not data:
        return None
    try:
        image = Image.open(io.BytesIO(base64.b64decode(data, validate=True)))
        image.load()
    except (ValueError, OSError) as e:
        logger.debug("Unusable thumbnail: %s", e)
        return None
    return image


def fit_cells(
    width: int, height: int, max_cols: int, max_rows: int, upscale: bool = False
) -> tuple[int, int]:
    """
    Size to draw a ``width`` x ``height`` image inside ``max_cols`` x ``max_rows`` cells.

    Returns:
        (columns, pixel rows); pixel rows is even, two per cell
    """
    if width <= 0 or height <= 0 or max_cols <= 0 or max_rows <= 0:
        return 1, 2
    scale = min(max_cols / width, max_rows * 2 / height)
    if not upscale:
        scale = min(scale, 1.0)
    columns = max(1, int(width * scale))
    pixel_rows = max(2, int(height * scale) // 2 * 2)
    return columns, pixel_rows


def thumbnail_renderable(
    data: str, max_cols: int, max_rows: int, placeholder: str = "···"
) -> RenderableType:
    image = decode_thumbnail(data)
    if image is None:
        return Text(placeholder, style="dim", justify="center")
    columns, pixel_rows = fit_cells(image.width, image.height, max_cols, max_rows)
    return Pixels.from_image(image.convert("RGB"), resize=(columns, pixel_rows))


def tile_content(progress: Optional[ConversionProgress]) -> RenderableType:
    if progress is None:
        return Text("···", style="dim", justify="center")
    label = str(progress.current_page)
    return Group(
        thumbnail_renderable(progress.thumbnail_base64, TILE_COLS, TILE_ROWS, label),
        Text(label, style="dim", justify="center"),
    )


class ThumbnailTile(Static, can_focus=True):
    """One grid slot: a pending placeholder until its page arrives."""

    BINDINGS = [("enter", "preview", "Preview")]

    class Pressed(Message):
        def __init__(self, tile: "ThumbnailTile") -> None:
            super().__init__()
            self.tile = tile

    def __init__(self, index: int, progress: Optional[ConversionProgress] = None) -> None:
        super().__init__(tile_content(progress), classes="thumbnail-tile")
        self.index = index
        self.progress = progress
        if progress is not None:
            self.add_class("-filled")

    @property
    def has_image(self) -> bool:
        return self.progress is not None and decode_thumbnail(self.progress.thumbnail_base64) is not None

    def fill(self, progress: ConversionProgress) -> None:
        self.progress = progress
        self.update(tile_content(progress))
        self.add_class("-filled")

    def on_click(self) -> None:
        self.post_message(self.Pressed(self))

    def action_preview(self) -> None:
        self.post_message(self.Pressed(self))


class ThumbnailGrid(VerticalScroll):
    """
    Thumbnails in arrival order with placeholders for pages still to come.

    Posts Selected when a filled tile is clicked or activated with Enter.
    """

    class Selected(Message):
        def __init__(self, pages: list[ConversionProgress], index: int) -> None:
            super().__init__()
            self.pages = pages
            self.index = index

    def __init__(self, id: Optional[str] = None) -> None:
        super().__init__(id=id, classes="thumbnail-grid")
        self._tiles: list[ThumbnailTile] = []
        self._pages: list[ConversionProgress] = []

    def compose(self) -> ComposeResult:
        yield Grid(classes="thumbnail-cells")

    @property
    def pages(self) -> list[ConversionProgress]:
        return list(self._pages)

    @property
    def page_numbers(self) -> list[int]:
        return [p.current_page for p in self._pages]

    @property
    def tiles(self) -> list[ThumbnailTile]:
        return list(self._tiles)

    def reset(self, total: int = 0) -> None:
        """Clear the grid and show ``total`` pending slots."""
        cells = self.query_one(".thumbnail-cells", Grid)
        cells.remove_children()
        self._pages = []
        self._tiles = [ThumbnailTile(index) for index in range(total)]
        if self._tiles:
            cells.mount(*self._tiles)

    def add(self, progress: ConversionProgress) -> None:
        """Fill the next slot and resize the pending slots to the reported total."""
        index = len(self._pages)
        self._pages.append(progress)
        if index < len(self._tiles):
            self._tiles[index].fill(progress)
        else:
            tile = ThumbnailTile(index, progress)
            self._tiles.append(tile)
            self.query_one(".thumbnail-cells", Grid).mount(tile)
        self._fit(progress.total_pages)

    def show(self, pages: list[ConversionProgress], total: int = 0) -> None:
        """Replace the grid with ``pages`` followed by pending slots up to ``total``."""
        self.reset()
        self._pages = list(pages)
        self._tiles = [ThumbnailTile(index, progress) for index, progress in enumerate(pages)]
        self._tiles += [ThumbnailTile(index) for index in range(len(pages), total)]
        if self._tiles:
            self.query_one(".thumbnail-cells", Grid).mount(*self._tiles)

    def _fit(self, total: int) -> None:
        target = max(total, len(self._pages))
        if len(self._tiles) > target:
            for tile in self._tiles[target:]:
                tile.remove()
            self._tiles = self._tiles[:target]
        elif len(self._tiles) < target:
            extra = [ThumbnailTile(index) for index in range(len(self._tiles), target)]
            self._tiles += extra
            self.query_one(".thumbnail-cells", Grid).mount(*extra)

    def on_thumbnail_tile_pressed(self, event: ThumbnailTile.Pressed) -> None:
        event.stop()
        if event.tile.progress is not None:
            self.post_message(self.Selected(self.pages, event.tile.index))
