"""
Thumbnail Rendering Tests
=========================
Decoding, cell fitting and the page grid widget.
"""

import base64
import io

import pytest
from PIL import Image
from rich.text import Text
from rich_pixels import Pixels
from textual.app import App, ComposeResult

from pagepix.models import ConversionProgress
from pagepix.tui.screens.thumbnails import (
    ThumbnailGrid,
    decode_thumbnail,
    fit_cells,
    thumbnail_renderable,
)


def png_base64(size=(120, 160), color="white") -> str:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class TestDecode:
    def test_valid_png(self):
        image = decode_thumbnail(png_base64())
        assert image.size == (120, 160)

    @pytest.mark.parametrize("data", ["", "not base64!", base64.b64encode(b"plain text").decode()])
    def test_unusable_data(self, data):
        assert decode_thumbnail(data) is None


class TestFitCells:
    def test_portrait_fills_tile(self):
        assert fit_cells(120, 160, 12, 8) == (12, 16)

    def test_landscape_is_width_bound(self):
        assert fit_cells(160, 120, 12, 8) == (12, 8)

    def test_never_upscales_by_default(self):
        assert fit_cells(120, 160, 200, 100) == (120, 160)
        assert fit_cells(120, 160, 200, 100, upscale=True) == (150, 200)

    def test_degenerate_sizes(self):
        assert fit_cells(0, 160, 12, 8) == (1, 2)
        assert fit_cells(120, 160, 0, 8) == (1, 2)


class TestRenderable:
    def test_image_renders_as_pixels(self):
        assert isinstance(thumbnail_renderable(png_base64(), 12, 8), Pixels)

    def test_missing_image_uses_placeholder(self):
        renderable = thumbnail_renderable("", 12, 8, placeholder="3")
        assert isinstance(renderable, Text)
        assert renderable.plain == "3"


class GridApp(App):
    def __init__(self):
        super().__init__()
        self.selected = []

    def compose(self) -> ComposeResult:
        yield ThumbnailGrid(id="grid")

    def on_thumbnail_grid_selected(self, message: ThumbnailGrid.Selected) -> None:
        self.selected.append((message.index, [p.current_page for p in message.pages]))


class TestThumbnailGrid:
    @pytest.mark.asyncio
    async def test_pages_fill_pending_slots(self):
        app = GridApp()
        async with app.run_test() as pilot:
            grid = app.query_one(ThumbnailGrid)
            grid.reset()
            grid.add(ConversionProgress(4, 3, png_base64()))
            await pilot.pause()
            assert len(grid.tiles) == 3
            assert grid.page_numbers == [4]
            assert grid.tiles[0].has_image is True
            assert grid.tiles[1].progress is None

            grid.add(ConversionProgress(5, 3, ""))
            await pilot.pause()
            assert grid.tiles[1].progress.current_page == 5
            assert grid.tiles[1].has_image is False

    @pytest.mark.asyncio
    async def test_refined_total_trims_pending_slots(self):
        app = GridApp()
        async with app.run_test() as pilot:
            grid = app.query_one(ThumbnailGrid)
            grid.reset()
            grid.add(ConversionProgress(1, 6, ""))
            grid.add(ConversionProgress(2, 2, ""))
            await pilot.pause()
            assert len(grid.tiles) == 2

    @pytest.mark.asyncio
    async def test_show_and_select(self):
        app = GridApp()
        async with app.run_test() as pilot:
            grid = app.query_one(ThumbnailGrid)
            grid.show([ConversionProgress(1, 2, png_base64()), ConversionProgress(2, 2, "")], 3)
            await pilot.pause()
            assert len(grid.tiles) == 3

            grid.tiles[1].focus()
            await pilot.press("enter")
            grid.tiles[2].focus()
            await pilot.press("enter")
            await pilot.pause()
            assert app.selected == [(1, [1, 2])]
