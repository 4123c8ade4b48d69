"""
Conversion Session Tests
========================
State machine transitions, backend subscription lifecycle and the
end-to-end conversion scenarios.
"""

import pytest

from pagepix.app.events import EventType, LogEvent, ProgressEvent, SessionStatus, StateEvent
from pagepix.app.session import (
    CancelConversion,
    Complete,
    ConversionCompleted,
    ConversionFailed,
    ConversionSession,
    ConvertAnother,
    Converting,
    Failed,
    GoHome,
    Idle,
    Ready,
    Retry,
    SelectFile,
    StartConversion,
    status_of,
    transition,
)
from pagepix.errors import BackendError, ErrorCode
from pagepix.models import ConversionResult, ImageFormat, NamingPattern

from conftest import FIXED_NOW, FailingStore


RESULT = ConversionResult(output_dir="/out", total_size=10, page_count=1, format=ImageFormat.PNG)


class QueuedDispatch:
    """Holds dispatched calls until flush(), like a busy UI loop."""

    def __init__(self):
        self.pending = []

    def __call__(self, fn, *args):
        self.pending.append((fn, args))

    def flush(self) -> int:
        pending, self.pending = self.pending, []
        for fn, args in pending:
            fn(*args)
        return len(pending)


@pytest.fixture
def events(session):
    received = []
    session.subscribe(received.append)
    return received


def statuses(events):
    return [e.status for e in events if isinstance(e, StateEvent)]


# ===========================================
# Pure transitions
# ===========================================

class TestTransition:
    def test_idle_select(self):
        state = transition(Idle(), SelectFile("/d/a.pdf", "a.pdf"))
        assert state == Ready("/d/a.pdf", "a.pdf")
        assert state.armed is True

    def test_ready_start(self):
        state = transition(Ready("/d/a.pdf", "a.pdf"), StartConversion("1-3"))
        assert state == Converting("/d/a.pdf", "a.pdf", "1-3")

    def test_disarmed_ready_ignores_start(self):
        ready = Ready("/d/a.pdf", "a.pdf", armed=False)
        assert transition(ready, StartConversion()) is ready

    def test_converting_outcomes(self):
        converting = Converting("/d/a.pdf", "a.pdf", "2")
        assert transition(converting, ConversionCompleted(RESULT)) == Complete("/d/a.pdf", "a.pdf", RESULT)
        assert transition(converting, ConversionFailed("boom")) == Failed("/d/a.pdf", "a.pdf", "boom", "2")
        assert transition(converting, CancelConversion()) == Idle()

    def test_failed_retry_keeps_page_range(self):
        state = transition(Failed("/d/a.pdf", "a.pdf", "boom", "4-6"), Retry())
        assert state == Ready("/d/a.pdf", "a.pdf", "4-6")

    def test_go_home_from_ready_and_failed(self):
        assert transition(Ready("/p", "p"), GoHome()) == Idle()
        assert transition(Failed("/p", "p", "x"), GoHome()) == Idle()

    def test_complete_convert_another(self):
        assert transition(Complete("/p", "p", RESULT), ConvertAnother()) == Idle()

    @pytest.mark.parametrize(
        "state,action",
        [
            (Idle(), StartConversion()),
            (Idle(), CancelConversion()),
            (Idle(), Retry()),
            (Ready("/p", "p"), SelectFile("/q", "q")),
            (Ready("/p", "p"), ConversionCompleted(RESULT)),
            (Converting("/p", "p"), SelectFile("/q", "q")),
            (Converting("/p", "p"), StartConversion()),
            (Converting("/p", "p"), GoHome()),
            (Complete("/p", "p", RESULT), CancelConversion()),
            (Complete("/p", "p", RESULT), GoHome()),
            (Failed("/p", "p", "x"), StartConversion()),
        ],
    )
    def test_inapplicable_action_returns_same_state(self, state, action):
        assert transition(state, action) is state

    def test_status_of(self):
        assert status_of(Idle()) is SessionStatus.IDLE
        assert status_of(Converting("/p", "p")) is SessionStatus.CONVERTING


# ===========================================
# End-to-end scenarios
# ===========================================

class TestHappyPath:
    def test_full_conversion(self, session, backend, history_store, events):
        assert session.select_file("/docs/report.pdf") is True
        assert session.status is SessionStatus.READY
        assert session.start() is True

        assert len(backend.requests) == 1
        request = backend.requests[0]
        assert request.pdf_path == "/docs/report.pdf"
        assert request.format is ImageFormat.PNG
        assert request.quality == 80
        assert request.naming_pattern is NamingPattern.FILENAME_PAGE_PADDED
        assert request.page_range == ""

        for page in range(1, 6):
            assert backend.progress(page, 5) == 1
        assert session.progress.percent == 100
        assert backend.complete(page_count=5) == 1

        assert isinstance(session.state, Complete)
        assert session.state.result.total_size == 102400
        assert session.listening is False

        entries = history_store.entries
        assert len(entries) == 1
        assert entries[0].filename == "report.pdf"
        assert entries[0].page_count == 5
        assert entries[0].timestamp == FIXED_NOW
        assert entries[0].pdf_path == "/docs/report.pdf"

        assert statuses(events) == [
            SessionStatus.READY,
            SessionStatus.CONVERTING,
            SessionStatus.COMPLETE,
        ]
        progress = [e for e in events if isinstance(e, ProgressEvent)]
        assert [p.percent for p in progress] == [20, 40, 60, 80, 100]
        assert progress[-1].current == 5
        assert progress[-1].total == 5

    def test_request_uses_current_settings(self, session, backend, settings_store):
        settings_store.update(format="jpeg", jpeg_quality=70, output_directory="/exports",
                              naming_pattern="number_only")
        session.select_file("/docs/a.pdf")
        session.start("1-2")
        request = backend.requests[0]
        assert request.format is ImageFormat.JPEG
        assert request.quality == 70
        assert request.output_directory == "/exports"
        assert request.naming_pattern is NamingPattern.NUMBER_ONLY
        assert request.page_range == "1-2"

    def test_progress_event_carries_thumbnail(self, session, backend, events):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.progress(1, 2, thumbnail="aGVsbG8=")
        backend.progress(2, 2)
        progress = [e for e in events if isinstance(e, ProgressEvent)]
        assert [p.thumbnail for p in progress] == ["aGVsbG8=", ""]
        assert session.progress.pages[0].thumbnail_base64 == "aGVsbG8="

    def test_log_event_on_start(self, session, events):
        session.select_file("/docs/a.pdf")
        session.start()
        logs = [e for e in events if isinstance(e, LogEvent)]
        assert logs[0].message == "Converting a.pdf"
        assert logs[0].event_type is EventType.LOG


class TestStartGuard:
    def test_start_without_file_is_ignored(self, session, backend):
        assert session.start() is False
        assert backend.requests == []
        assert session.status is SessionStatus.IDLE

    def test_double_start_sends_one_request(self, session, backend):
        session.select_file("/docs/a.pdf")
        assert session.start() is True
        assert session.start() is False
        assert len(backend.requests) == 1
        assert session.requests_sent == 1

    def test_select_while_converting_is_ignored(self, session):
        session.select_file("/docs/a.pdf")
        session.start()
        assert session.select_file("/docs/b.pdf") is False
        assert session.state.filename == "a.pdf"


class TestCancellation:
    def test_cancel_mid_conversion(self, session, backend, history_store, events):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.progress(1, 10)
        backend.progress(2, 10)

        assert session.cancel() is True
        assert backend.cancel_calls == 1
        assert session.status is SessionStatus.IDLE
        assert session.progress.current_count == 0
        assert session.listening is False

        assert backend.progress(3, 10) == 0
        assert backend.complete() == 0
        assert session.status is SessionStatus.IDLE
        assert history_store.entries == []

    def test_cancel_survives_backend_failure(self, session, backend):
        backend.cancel_error = RuntimeError("gone")
        session.select_file("/docs/a.pdf")
        session.start()
        assert session.cancel() is True
        assert session.status is SessionStatus.IDLE

    def test_cancel_when_not_converting(self, session, backend):
        assert session.cancel() is False
        assert backend.cancel_calls == 0


class TestFailure:
    def test_backend_error_event(self, session, backend, history_store, events):
        session.select_file("/docs/a.pdf")
        session.start("3-4")
        backend.progress(3, 2)
        backend.error("Failed to render page 4")

        state = session.state
        assert isinstance(state, Failed)
        assert state.message == "Failed to render page 4"
        assert session.listening is False
        assert history_store.entries == []
        assert events[-1].message == "Failed to render page 4"

        assert session.retry() is True
        assert session.state == Ready("/docs/a.pdf", "a.pdf", "3-4")
        assert session.progress.current_count == 0

    def test_convert_raises_backend_error(self, session, backend, backend_error):
        backend.convert_error = backend_error
        session.select_file("/docs/missing.pdf")
        assert session.start() is True
        assert isinstance(session.state, Failed)
        assert session.state.message == "PDF file not found"
        assert session.listening is False

    def test_convert_raises_unexpected(self, session, backend):
        backend.convert_error = RuntimeError("socket closed")
        session.select_file("/docs/a.pdf")
        session.start()
        assert session.state.message == "socket closed"

    def test_go_home_from_failed(self, session, backend):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.error("nope")
        assert session.go_home() is True
        assert session.status is SessionStatus.IDLE

    def test_retry_then_restart_sends_second_request(self, session, backend):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.error("nope")
        session.retry()
        session.start()
        assert len(backend.requests) == 2
        assert session.generation == 2


class TestMalformedPayloads:
    def test_malformed_progress_is_fault(self, session, backend):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.emit("conversion-progress", {"currentPage": "one", "totalPages": 3})
        assert session.protocol_faults == 1
        assert session.status is SessionStatus.CONVERTING
        assert session.progress.current_count == 0

    def test_duplicate_progress_is_fault(self, session, backend, events):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.progress(1, 3)
        backend.progress(1, 3)
        assert session.protocol_faults == 1
        assert session.progress.page_numbers == [1]
        warnings = [e for e in events if isinstance(e, LogEvent) and e.level == "warning"]
        assert [w.message for w in warnings] == ["progress for page 1 after page 1"]
        assert len([e for e in events if isinstance(e, ProgressEvent)]) == 1

    def test_malformed_complete_fails(self, session, backend, history_store):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.emit("conversion-complete", {"outputDir": "/out", "format": "tiff"})
        assert isinstance(session.state, Failed)
        assert session.state.message.startswith("Malformed result from renderer")
        assert history_store.entries == []

    def test_malformed_error_uses_generic_message(self, session, backend):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.emit("conversion-error", {"reason": "?"})
        assert session.state.message == "Conversion failed"


class TestLateEvents:
    def test_queued_events_from_old_generation_are_dropped(self, backend, settings_store, history_store):
        dispatch = QueuedDispatch()
        session = ConversionSession(backend, settings_store, history_store,
                                    dispatch=dispatch, clock=lambda: FIXED_NOW)
        session.select_file("/docs/a.pdf")
        session.start()
        backend.progress(1, 4)
        backend.progress(2, 4)
        session.cancel()

        session.select_file("/docs/b.pdf")
        session.start()
        backend.progress(1, 2)

        assert dispatch.flush() == 3
        assert session.protocol_faults == 2
        assert session.progress.page_numbers == [1]
        assert session.progress.total_pages == 2

    def test_queued_event_after_completion_is_dropped(self, backend, settings_store, history_store):
        dispatch = QueuedDispatch()
        session = ConversionSession(backend, settings_store, history_store, dispatch=dispatch)
        session.select_file("/docs/a.pdf")
        session.start()
        backend.complete(page_count=1)
        backend.progress(1, 1)
        dispatch.flush()

        assert isinstance(session.state, Complete)
        assert session.protocol_faults == 1
        assert len(history_store.entries) == 1

    def test_reset_releases_listeners(self, session, backend):
        session.select_file("/docs/a.pdf")
        session.start()
        session.reset()
        assert session.listening is False
        assert backend.progress(1, 1) == 0
        assert session.status is SessionStatus.IDLE


class TestHistoryWrites:
    def test_history_write_failure_still_completes(self, backend, settings_store):
        from pagepix.app.history import HistoryStore

        history = HistoryStore(FailingStore(fail_reads=False))
        session = ConversionSession(backend, settings_store, history)
        session.select_file("/docs/a.pdf")
        session.start()
        backend.complete(page_count=3)

        assert isinstance(session.state, Complete)
        assert history.entries[0].page_count == 3

    def test_convert_another_returns_to_idle(self, session, backend):
        session.select_file("/docs/a.pdf")
        session.start()
        backend.progress(1, 1)
        backend.complete(page_count=1)
        assert session.convert_another() is True
        assert session.status is SessionStatus.IDLE
        assert session.progress.current_count == 0
