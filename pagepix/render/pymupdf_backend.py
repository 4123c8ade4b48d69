"""
PyMuPDF Render Backend
======================
Renders PDF pages with PyMuPDF and encodes them with Pillow on a worker
thread, reporting through the backend events.

Features:
- ~300 DPI output capped to A4 at 300 DPI (2480x3508)
- PNG/JPEG/WebP encoding with per-format quality
- Base64 PNG thumbnail per page
- Cooperative cancellation between pages
"""

from __future__ import annotations

import base64
import io
import logging
import subprocess
import sys
import threading
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF
from PIL import Image

from pagepix.concurrency import CancellationToken
from pagepix.errors import BackendError, ConversionCancelledError, ErrorCode
from pagepix.models import (
    COMPLETE_EVENT,
    ERROR_EVENT,
    PROGRESS_EVENT,
    ConversionError,
    ConversionProgress,
    ConversionResult,
    ImageFormat,
)
from pagepix.render.backend import ConversionRequest, RenderBackend
from pagepix.render.naming import build_output_dir, generate_filename, parse_page_range

logger = logging.getLogger(__name__)

TARGET_WIDTH = 2480
MAX_HEIGHT = 3508
THUMBNAIL_SIZE = (120, 160)


def render_zoom(width: float, height: float) -> float:
    """Zoom factor fitting a page to TARGET_WIDTH without exceeding MAX_HEIGHT."""
    if width <= 0 or height <= 0:
        return 1.0
    zoom = TARGET_WIDTH / width
    if height * zoom > MAX_HEIGHT:
        zoom = MAX_HEIGHT / height
    return zoom


def make_thumbnail(image: Image.Image) -> str:
    """Base64-encoded PNG no larger than THUMBNAIL_SIZE; empty on failure."""
    thumb = image.copy()
    thumb.thumbnail(THUMBNAIL_SIZE)
    buffer = io.BytesIO()
    try:
        thumb.save(buffer, "PNG")
    except OSError as e:
        logger.warning("Thumbnail encoding failed: %s", e)
        return ""
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def save_image(image: Image.Image, path: Path, image_format: ImageFormat, quality: int) -> int:
    """
    Encode ``image`` to ``path``.

    Returns:
        Size of the written file in bytes

    Raises:
        BackendError: If encoding or writing fails
    """
    try:
        if image_format is ImageFormat.PNG:
            image.save(path, "PNG")
        elif image_format is ImageFormat.JPEG:
            image.convert("RGB").save(path, "JPEG", quality=quality, optimize=True)
        elif image_format is ImageFormat.WEBP:
            image.save(path, "WEBP", quality=quality)
        else:
            raise BackendError(ErrorCode.E102, f"Unsupported format: {image_format}")
    except OSError as e:
        raise BackendError(
            ErrorCode.E101,
            f"Failed to save {image_format.value.upper()}: {e}",
            file_path=path,
        ) from e
    return path.stat().st_size


class _Run:
    """One conversion: its worker thread and cancellation token."""

    def __init__(self, request: ConversionRequest):
        self.request = request
        self.token = CancellationToken()
        self.thread: Optional[threading.Thread] = None

    @property
    def alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()


class PyMuPDFBackend(RenderBackend):
    """
    Threaded PyMuPDF renderer.

    A cancelled run winds down at the next page boundary. A new request
    is accepted straight away; the old run stops reporting once replaced,
    and MuPDF work is serialized across runs.

    Example:
        backend = PyMuPDFBackend()
        backend.listen("conversion-progress", on_progress)
        backend.convert(ConversionRequest("/docs/report.pdf", ImageFormat.PNG, 80))
    """

    def __init__(self):
        super().__init__()
        self._run: Optional[_Run] = None
        self._lock = threading.Lock()
        self._mupdf_lock = threading.Lock()

    @property
    def running(self) -> bool:
        run = self._run
        return run is not None and run.alive

    def convert(self, request: ConversionRequest) -> None:
        """
        Validate the request and start rendering in the background.

        Raises:
            BackendError: If an uncancelled conversion is running or the PDF is missing
        """
        pdf_path = Path(request.pdf_path)
        with self._lock:
            current = self._run
            if current is not None and current.alive and not current.token.is_cancelled():
                raise BackendError(ErrorCode.E401, "A conversion is already running")
            if not pdf_path.is_file():
                raise BackendError(ErrorCode.E001, "PDF file not found", file_path=pdf_path)

            if current is not None and current.alive:
                logger.info("Starting %s while a cancelled run winds down", pdf_path.name)

            run = _Run(request)
            run.thread = threading.Thread(
                target=self._work,
                args=(run,),
                name="pagepix-render",
                daemon=True,
            )
            self._run = run
            run.thread.start()

    def cancel(self) -> None:
        run = self._run
        if run is not None:
            run.token.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the current worker to finish.

        Returns:
            True if no worker is running afterwards
        """
        run = self._run
        if run is None or run.thread is None:
            return True
        run.thread.join(timeout=timeout)
        return not run.thread.is_alive()

    def open_folder(self, path: str) -> None:
        if sys.platform == "darwin":
            command = ["open", path]
        elif sys.platform.startswith("win"):
            command = ["explorer", path]
        else:
            command = ["xdg-open", path]

        try:
            subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            raise BackendError(
                ErrorCode.E103,
                f"Failed to open folder: {e}",
                file_path=Path(path),
            ) from e

    # ===========================================
    # Worker
    # ===========================================

    def _report(self, run: _Run, event: str, payload: dict) -> None:
        if run is not self._run:
            logger.debug("Dropping %s from a replaced run", event)
            return
        self.emit(event, payload)

    def _work(self, run: _Run) -> None:
        request = run.request
        try:
            result = self._render(run)
        except ConversionCancelledError as e:
            logger.info("Conversion of %s cancelled", request.pdf_path)
            self._report(run, ERROR_EVENT, ConversionError(e.message).to_payload())
        except BackendError as e:
            logger.error("Conversion failed: %s", e)
            self._report(run, ERROR_EVENT, ConversionError(e.message).to_payload())
        except Exception as e:
            logger.exception("Unexpected error converting %s", request.pdf_path)
            self._report(run, ERROR_EVENT, ConversionError(str(e) or type(e).__name__).to_payload())
        else:
            self._report(run, COMPLETE_EVENT, result.to_payload())

    def _render(self, run: _Run) -> ConversionResult:
        request = run.request
        pdf_path = Path(request.pdf_path)
        image_format = ImageFormat(request.format)

        with self._mupdf_lock:
            try:
                doc = fitz.open(str(pdf_path))
            except Exception as e:
                raise BackendError(
                    ErrorCode.E002, f"Failed to open PDF: {e}", file_path=pdf_path
                ) from e

        try:
            document_pages = doc.page_count
            pages = parse_page_range(request.page_range, document_pages)
            selected = len(pages)

            out_dir = build_output_dir(pdf_path, request.output_directory)
            try:
                out_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise BackendError(
                    ErrorCode.E100,
                    f"Failed to create output directory: {e}",
                    file_path=out_dir,
                ) from e

            stem = pdf_path.stem or "page"
            total_size = 0

            for page_num in pages:
                run.token.raise_if_cancelled()

                with self._mupdf_lock:
                    image = self._render_page(doc, page_num)
                filename = generate_filename(
                    request.naming_pattern, stem, page_num, document_pages, image_format
                )
                total_size += save_image(image, out_dir / filename, image_format, request.quality)

                progress = ConversionProgress(
                    current_page=page_num,
                    total_pages=selected,
                    thumbnail_base64=make_thumbnail(image),
                )
                self._report(run, PROGRESS_EVENT, progress.to_payload())

            return ConversionResult(
                output_dir=str(out_dir),
                total_size=total_size,
                page_count=selected,
                format=image_format,
            )
        finally:
            with self._mupdf_lock:
                doc.close()

    def _render_page(self, doc, page_num: int) -> Image.Image:
        try:
            page = doc.load_page(page_num - 1)
            zoom = render_zoom(page.rect.width, page.rect.height)
            pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
            return Image.open(io.BytesIO(pix.tobytes("ppm")))
        except Exception as e:
            raise BackendError(
                ErrorCode.E003, f"Failed to render page {page_num}: {e}"
            ) from e
