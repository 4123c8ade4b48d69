"""
Error and Cancellation Tests
============================
"""

import threading

import pytest

from pagepix.concurrency import CancellationToken
from pagepix.errors import (
    BackendError,
    ConversionCancelledError,
    ErrorCode,
    PageRangeError,
    PagePixError,
    StorageError,
)


class TestErrors:
    def test_str_includes_code_and_details(self):
        error = BackendError(ErrorCode.E003, "Failed to render page 2", details="bad xref",
                             file_path="/docs/a.pdf")
        text = str(error)
        assert text.startswith("[E003] Page render failed: Failed to render page 2")
        assert "(bad xref)" in text
        assert "/docs/a.pdf" in text

    def test_storage_error_codes(self):
        assert StorageError("x").code is ErrorCode.E200
        assert StorageError("x", key="k", write=True).code is ErrorCode.E201
        assert StorageError("x", key="k").details == "key=k"

    def test_hierarchy(self):
        assert issubclass(PageRangeError, BackendError)
        assert issubclass(ConversionCancelledError, BackendError)
        assert issubclass(BackendError, PagePixError)

    def test_cancelled_message(self):
        error = ConversionCancelledError()
        assert error.code is ErrorCode.E400
        assert error.message == "Conversion cancelled"


class TestCancellationToken:
    def test_lifecycle(self):
        token = CancellationToken()
        assert not token.is_cancelled()
        token.raise_if_cancelled()
        token.cancel()
        assert token.is_cancelled()
        with pytest.raises(ConversionCancelledError):
            token.raise_if_cancelled()
        token.reset()
        assert not token.is_cancelled()

    def test_cancel_from_other_thread(self):
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()
        assert token.is_cancelled()
