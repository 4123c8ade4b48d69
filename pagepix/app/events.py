"""
Application Event Contracts
===========================
Typed events for progress/log/state updates published by the conversion
session to the TUI.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Union


class EventType(str, Enum):
    """High-level event categories."""

    PROGRESS = "progress"
    LOG = "log"
    STATE = "state"


class SessionStatus(str, Enum):
    """Conversion session lifecycle states."""

    IDLE = "idle"
    READY = "ready"
    CONVERTING = "converting"
    COMPLETE = "complete"
    FAILED = "failed"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ProgressEvent:
    """Aggregated progress after an accepted page."""

    event_type: EventType
    timestamp: str
    page: int
    current: int
    total: int
    percent: int
    thumbnail: str = ""


@dataclass(frozen=True)
class LogEvent:
    """Log message emitted from the session/controller."""

    event_type: EventType
    timestamp: str
    level: str
    message: str


@dataclass(frozen=True)
class StateEvent:
    """Session state transition."""

    event_type: EventType
    timestamp: str
    status: SessionStatus
    message: str = ""


AppEvent = Union[ProgressEvent, LogEvent, StateEvent]


def make_progress_event(
    page: int, current: int, total: int, percent: int, thumbnail: str = ""
) -> ProgressEvent:
    """Create a normalized progress event; ``thumbnail`` is base64 PNG or empty."""
    return ProgressEvent(
        event_type=EventType.PROGRESS,
        timestamp=_now_iso(),
        page=page,
        current=current,
        total=total,
        percent=max(0, min(100, percent)),
        thumbnail=thumbnail,
    )


def make_log_event(message: str, level: str = "info") -> LogEvent:
    """Create a normalized log event."""
    return LogEvent(
        event_type=EventType.LOG,
        timestamp=_now_iso(),
        level=level.lower(),
        message=message,
    )


def make_state_event(status: SessionStatus, message: str = "") -> StateEvent:
    """Create a normalized state event."""
    return StateEvent(
        event_type=EventType.STATE,
        timestamp=_now_iso(),
        status=status,
        message=message,
    )
