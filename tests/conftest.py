import sys
from pathlib import Path
from typing import Optional

import pytest

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from pagepix.app.history import HistoryStore
from pagepix.app.session import ConversionSession
from pagepix.app.settings import SettingsStore
from pagepix.errors import BackendError, ErrorCode, StorageError
from pagepix.models import COMPLETE_EVENT, ERROR_EVENT, PROGRESS_EVENT
from pagepix.render.backend import ConversionRequest, RenderBackend
from pagepix.storage import KeyValueStore, MemoryStore
from pagepix.ui.theme import StaticAppearance

FIXED_NOW = 1_700_000_000.0


class FailingStore(KeyValueStore):
    """Store whose every operation raises StorageError."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.inner = MemoryStore()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError("disk unavailable", key=key)
        return self.inner.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("disk full", key=key, write=True)
        self.inner.set(key, value)

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError("disk full", key=key, write=True)
        self.inner.remove(key)


class FakeBackend(RenderBackend):
    """Backend that records commands; tests emit events by hand."""

    def __init__(self):
        super().__init__()
        self.requests: list[ConversionRequest] = []
        self.cancel_calls = 0
        self.opened: list[str] = []
        self.convert_error: Optional[Exception] = None
        self.cancel_error: Optional[Exception] = None
        self.open_error: Optional[Exception] = None

    def convert(self, request: ConversionRequest) -> None:
        self.requests.append(request)
        if self.convert_error is not None:
            raise self.convert_error

    def cancel(self) -> None:
        self.cancel_calls += 1
        if self.cancel_error is not None:
            raise self.cancel_error

    def open_folder(self, path: str) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened.append(path)

    # Helpers for tests

    def progress(self, page: int, total: int, thumbnail: str = "") -> int:
        return self.emit(
            PROGRESS_EVENT,
            {"currentPage": page, "totalPages": total, "thumbnailBase64": thumbnail},
        )

    def complete(self, output_dir: str = "/out", total_size: int = 102400,
                 page_count: int = 5, fmt: str = "png") -> int:
        return self.emit(
            COMPLETE_EVENT,
            {"outputDir": output_dir, "totalSize": total_size, "pageCount": page_count, "format": fmt},
        )

    def error(self, message: str) -> int:
        return self.emit(ERROR_EVENT, {"message": message})


@pytest.fixture
def storage():
    return MemoryStore()


@pytest.fixture
def settings_store(storage):
    store = SettingsStore(storage)
    store.load()
    return store


@pytest.fixture
def history_store(storage):
    store = HistoryStore(storage)
    store.load()
    return store


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session(backend, settings_store, history_store):
    return ConversionSession(backend, settings_store, history_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def appearance():
    return StaticAppearance(dark=True)


@pytest.fixture
def sample_pdf(tmp_path):
    """Path to a placeholder PDF (content is never parsed by the fake backend)."""
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4\n%%EOF\n")
    return path


@pytest.fixture
def backend_error():
    return BackendError(ErrorCode.E001, "PDF file not found")
