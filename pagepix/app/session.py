"""
Conversion Session
==================
State machine driving one PDF conversion from file selection through
streamed progress to completion, failure or cancellation.

The states form a tagged union and transition() is a pure function over
(state, action). ConversionSession runs it against a render backend:
it owns the backend subscriptions, the progress aggregator and the
history write on completion, and publishes AppEvents to the UI.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pagepix.app.events import (
    AppEvent,
    SessionStatus,
    make_log_event,
    make_progress_event,
    make_state_event,
)
from pagepix.app.history import HistoryStore, RecentConversion
from pagepix.app.progress import ProgressAggregator
from pagepix.app.settings import SettingsStore
from pagepix.errors import BackendError
from pagepix.models import (
    COMPLETE_EVENT,
    ERROR_EVENT,
    PROGRESS_EVENT,
    ConversionError,
    ConversionProgress,
    ConversionResult,
)
from pagepix.render.backend import ConversionRequest, RenderBackend
from pagepix.subscriptions import ListenerRegistry, Subscription, SubscriptionGroup

logger = logging.getLogger(__name__)

Dispatch = Callable[..., Any]


# ===========================================
# States
# ===========================================

@dataclass(frozen=True)
class Idle:
    """No file chosen."""


@dataclass(frozen=True)
class Ready:
    """
    File chosen, waiting for the user to confirm the page range.

    ``armed`` is the one-shot start token; it is only ever set by entering
    Ready and is consumed by the move to Converting.
    """

    pdf_path: str
    filename: str
    page_range: str = ""
    armed: bool = True


@dataclass(frozen=True)
class Converting:
    pdf_path: str
    filename: str
    page_range: str = ""


@dataclass(frozen=True)
class Complete:
    pdf_path: str
    filename: str
    result: ConversionResult


@dataclass(frozen=True)
class Failed:
    pdf_path: str
    filename: str
    message: str
    page_range: str = ""


SessionState = Union[Idle, Ready, Converting, Complete, Failed]

_STATUS = {
    Idle: SessionStatus.IDLE,
    Ready: SessionStatus.READY,
    Converting: SessionStatus.CONVERTING,
    Complete: SessionStatus.COMPLETE,
    Failed: SessionStatus.FAILED,
}


def status_of(state: SessionState) -> SessionStatus:
    return _STATUS[type(state)]


# ===========================================
# Actions
# ===========================================

@dataclass(frozen=True)
class SelectFile:
    pdf_path: str
    filename: str


@dataclass(frozen=True)
class StartConversion:
    page_range: str = ""


@dataclass(frozen=True)
class ConversionCompleted:
    result: ConversionResult


@dataclass(frozen=True)
class ConversionFailed:
    message: str


@dataclass(frozen=True)
class CancelConversion:
    pass


@dataclass(frozen=True)
class Retry:
    pass


@dataclass(frozen=True)
class GoHome:
    pass


@dataclass(frozen=True)
class ConvertAnother:
    pass


Action = Union[
    SelectFile,
    StartConversion,
    ConversionCompleted,
    ConversionFailed,
    CancelConversion,
    Retry,
    GoHome,
    ConvertAnother,
]


def transition(state: SessionState, action: Action) -> SessionState:
    """
    Next state for ``action``.

    Returns ``state`` itself (the same object) when the action does not
    apply to it.
    """
    if isinstance(state, Idle):
        if isinstance(action, SelectFile):
            return Ready(pdf_path=action.pdf_path, filename=action.filename)

    elif isinstance(state, Ready):
        if isinstance(action, StartConversion) and state.armed:
            return Converting(
                pdf_path=state.pdf_path,
                filename=state.filename,
                page_range=action.page_range,
            )
        if isinstance(action, GoHome):
            return Idle()

    elif isinstance(state, Converting):
        if isinstance(action, ConversionCompleted):
            return Complete(state.pdf_path, state.filename, action.result)
        if isinstance(action, ConversionFailed):
            return Failed(state.pdf_path, state.filename, action.message, state.page_range)
        if isinstance(action, CancelConversion):
            return Idle()

    elif isinstance(state, Failed):
        if isinstance(action, Retry):
            return Ready(
                pdf_path=state.pdf_path,
                filename=state.filename,
                page_range=state.page_range,
            )
        if isinstance(action, GoHome):
            return Idle()

    elif isinstance(state, Complete):
        if isinstance(action, ConvertAnother):
            return Idle()

    return state


def _call_now(fn: Callable[..., Any], *args: Any) -> Any:
    return fn(*args)


# ===========================================
# Session
# ===========================================

class ConversionSession:
    """
    Runs the session state machine against a render backend.

    Backend listeners are registered before the request is sent and
    released together on the terminal event, on cancel and on reset.
    Each registration carries a generation number; an event delivered for
    any other generation, or after release, is counted as a protocol fault
    and dropped.

    Example:
        session = ConversionSession(backend, settings_store, history_store,
                                    dispatch=app.call_from_thread)
        session.subscribe(on_event)
        session.select_file("/docs/report.pdf")
        session.start("1-5")
    """

    def __init__(
        self,
        backend: RenderBackend,
        settings_store: SettingsStore,
        history_store: HistoryStore,
        dispatch: Optional[Dispatch] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            backend: Render backend receiving requests
            settings_store: Source of format, quality and naming for each request
            history_store: Receives one entry per completed conversion
            dispatch: ``dispatch(fn, *args)`` runs fn on the UI loop; backend
                events may arrive on a worker thread
            clock: Epoch-seconds clock for history timestamps
        """
        self._backend = backend
        self._settings_store = settings_store
        self._history_store = history_store
        self._dispatch = dispatch or _call_now
        self._clock = clock

        self._state: SessionState = Idle()
        self._progress = ProgressAggregator()
        self._listeners: ListenerRegistry[Callable[[AppEvent], None]] = ListenerRegistry()
        self._group: Optional[SubscriptionGroup] = None
        self._generation = 0
        self.protocol_faults = 0
        self.requests_sent = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return status_of(self._state)

    @property
    def progress(self) -> ProgressAggregator:
        return self._progress

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def listening(self) -> bool:
        """True while backend listeners are registered."""
        return self._group is not None and self._group.active

    def subscribe(self, listener: Callable[[AppEvent], None]) -> Subscription:
        """Receive state, progress and log events."""
        return self._listeners.subscribe(listener)

    # ==================== Commands ====================

    def select_file(self, pdf_path: Union[str, Path]) -> bool:
        """Idle -> Ready for ``pdf_path``. Returns False if ignored."""
        path = Path(pdf_path)
        if isinstance(self._state, Idle):
            self._progress.reset()
        return self._apply(SelectFile(pdf_path=str(path), filename=path.name))

    def start(self, page_range: str = "") -> bool:
        """
        Ready -> Converting and send exactly one backend request.

        The page range is forwarded verbatim; the backend owns its syntax.

        Returns:
            True if a request was sent
        """
        state = self._state
        if not isinstance(state, Ready) or not state.armed:
            logger.debug("Ignoring start while %s", self.status.value)
            return False

        self._teardown()
        self._progress.reset()
        self._generation += 1
        generation = self._generation

        group = SubscriptionGroup()
        for event in (PROGRESS_EVENT, COMPLETE_EVENT, ERROR_EVENT):
            group.add(self._backend.listen(event, self._listener_for(generation, event)))
        self._group = group

        self._apply(StartConversion(page_range=page_range))

        settings = self._settings_store.settings
        request = ConversionRequest(
            pdf_path=state.pdf_path,
            format=settings.format,
            quality=settings.quality,
            output_directory=settings.output_directory,
            naming_pattern=settings.naming_pattern,
            page_range=page_range,
        )
        self._publish(make_log_event(f"Converting {state.filename}"))
        self.requests_sent += 1

        try:
            self._backend.convert(request)
        except BackendError as e:
            logger.error("Conversion request rejected: %s", e)
            self._fail(e.message)
        except Exception as e:
            logger.exception("Conversion request failed")
            self._fail(str(e) or type(e).__name__)
        return True

    def cancel(self) -> bool:
        """
        Converting -> Idle.

        The backend is asked to stop but the state moves to Idle whatever
        the outcome; trailing events are dropped.
        """
        if not isinstance(self._state, Converting):
            logger.debug("Ignoring cancel while %s", self.status.value)
            return False

        self._teardown()
        try:
            self._backend.cancel()
        except Exception as e:
            logger.warning("Backend cancel failed: %s", e)
        self._progress.reset()
        return self._apply(CancelConversion())

    def retry(self) -> bool:
        """Failed -> Ready with the same file and page range."""
        if isinstance(self._state, Failed):
            self._progress.reset()
        return self._apply(Retry())

    def go_home(self) -> bool:
        """Failed or Ready -> Idle."""
        if isinstance(self._state, (Ready, Failed)):
            self._progress.reset()
        return self._apply(GoHome())

    def convert_another(self) -> bool:
        """Complete -> Idle."""
        if isinstance(self._state, Complete):
            self._progress.reset()
        return self._apply(ConvertAnother())

    def reset(self) -> None:
        """Drop any running conversion's listeners and return to Idle."""
        self._teardown()
        self._progress.reset()
        if not isinstance(self._state, Idle):
            self._set_state(Idle())

    # ==================== Internals ====================

    def _apply(self, action: Action) -> bool:
        new_state = transition(self._state, action)
        if new_state is self._state:
            logger.debug(
                "Ignoring %s while %s", type(action).__name__, self.status.value
            )
            return False
        self._set_state(new_state)
        return True

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        message = state.message if isinstance(state, Failed) else ""
        self._publish(make_state_event(status_of(state), message))

    def _publish(self, event: AppEvent) -> None:
        self._listeners.notify(event)

    def _teardown(self) -> None:
        if self._group is not None:
            self._group.release()
            self._group = None

    def _fail(self, message: str) -> None:
        self._teardown()
        self._apply(ConversionFailed(message=message))

    def _listener_for(self, generation: int, event: str) -> Callable[[dict], None]:
        def listener(payload: dict) -> None:
            self._dispatch(self._deliver, generation, event, payload)

        return listener

    def _protocol_fault(self, reason: str) -> None:
        self.protocol_faults += 1
        logger.warning("Discarding backend event: %s", reason)
        self._publish(make_log_event(reason, level="warning"))

    def _deliver(self, generation: int, event: str, payload: dict) -> None:
        if not self.listening or generation != self._generation:
            self._protocol_fault(f"{event} for a finished session")
            return
        if not isinstance(self._state, Converting):
            self._protocol_fault(f"{event} while {self.status.value}")
            return

        if event == PROGRESS_EVENT:
            self._on_progress(payload)
        elif event == COMPLETE_EVENT:
            self._on_complete(payload)
        elif event == ERROR_EVENT:
            self._on_error(payload)

    def _on_progress(self, payload: dict) -> None:
        try:
            progress = ConversionProgress.from_payload(payload)
        except ValueError as e:
            self._protocol_fault(f"malformed progress: {e}")
            return

        last_page = self._progress.last_page
        if not self._progress.append(progress):
            self._protocol_fault(
                f"progress for page {progress.current_page} after page {last_page}"
            )
            return

        self._publish(
            make_progress_event(
                page=progress.current_page,
                current=self._progress.current_count,
                total=self._progress.display_total,
                percent=self._progress.percent,
                thumbnail=progress.thumbnail_base64,
            )
        )

    def _on_complete(self, payload: dict) -> None:
        state = self._state
        try:
            result = ConversionResult.from_payload(payload)
        except ValueError as e:
            logger.error("Malformed completion payload: %s", e)
            self._fail(f"Malformed result from renderer: {e}")
            return

        self._teardown()
        self._history_store.add(
            RecentConversion(
                filename=state.filename,
                page_count=result.page_count,
                format=result.format,
                timestamp=self._clock(),
                output_dir=result.output_dir,
                pdf_path=state.pdf_path,
            )
        )
        self._apply(ConversionCompleted(result=result))

    def _on_error(self, payload: dict) -> None:
        try:
            message = ConversionError.from_payload(payload).message
        except ValueError as e:
            logger.warning("Malformed error payload: %s", e)
            message = "Conversion failed"
        self._fail(message)


