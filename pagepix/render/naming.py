"""
Output Naming
=============
Output directory and per-page filename rules, plus page-range parsing.
"""

from __future__ import annotations

import re
from pathlib import Path

from pagepix.errors import PageRangeError
from pagepix.models import ImageFormat, NamingPattern

MIN_PAD_WIDTH = 3

_RANGE_PART_RE = re.compile(r"^(\d+)(?:\s*-\s*(\d+))?$")


def build_output_dir(pdf_path: Path, output_directory: str = "") -> Path:
    """
    Directory receiving the page images.

    Args:
        pdf_path: Source PDF
        output_directory: Custom output root; empty means the PDF's folder

    Returns:
        ``<root>/<pdf stem>``
    """
    pdf_path = Path(pdf_path)
    stem = pdf_path.stem or "output"
    base = Path(output_directory) if output_directory else pdf_path.parent
    return base / stem


def pad_width(total: int) -> int:
    return max(MIN_PAD_WIDTH, len(str(total)))


def generate_filename(
    pattern: NamingPattern,
    stem: str,
    page: int,
    total: int,
    image_format: ImageFormat,
) -> str:
    """
    File name for one page.

    Args:
        pattern: Naming pattern (unknown values fall back to filename_page_padded)
        stem: Source PDF stem
        page: 1-based page number
        total: Page count of the document, used for the pad width
        image_format: Output format; jpeg is written as ``.jpg``
    """
    ext = ImageFormat(image_format).extension
    padded = str(page).zfill(pad_width(total))

    try:
        pattern = NamingPattern(pattern)
    except ValueError:
        pattern = NamingPattern.FILENAME_PAGE_PADDED

    if pattern is NamingPattern.FILENAME_NUMBER:
        return f"{stem}_{page}.{ext}"
    if pattern is NamingPattern.PAGE_PADDED:
        return f"page_{padded}.{ext}"
    if pattern is NamingPattern.NUMBER_ONLY:
        return f"{padded}.{ext}"
    return f"{stem}_page_{padded}.{ext}"


def parse_page_range(selection: str, page_count: int) -> list[int]:
    """
    Resolve a page selection against a document.

    Grammar: comma-separated ``N`` or ``A-B`` items, 1-based and inclusive.
    Whitespace is ignored and overlapping items are merged.

    Args:
        selection: Selection text; empty selects every page
        page_count: Pages in the document

    Returns:
        Sorted, unique 1-based page numbers

    Raises:
        PageRangeError: If the text is malformed or out of bounds
    """
    selection = (selection or "").strip()
    if not selection:
        return list(range(1, page_count + 1))

    pages: set[int] = set()
    for part in selection.split(","):
        part = part.strip()
        if not part:
            raise PageRangeError(selection, "empty item")

        match = _RANGE_PART_RE.match(part)
        if not match:
            raise PageRangeError(selection, f"'{part}' is not a page or range")

        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) else start
        if start < 1 or end < 1:
            raise PageRangeError(selection, "pages start at 1")
        if start > end:
            raise PageRangeError(selection, f"'{part}' is reversed")
        if end > page_count:
            raise PageRangeError(selection, f"page {end} is beyond the last page ({page_count})")

        pages.update(range(start, end + 1))

    return sorted(pages)
