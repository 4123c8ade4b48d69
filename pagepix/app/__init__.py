"""
Application Module
==================
Core application controller and business logic.

Key Components:
    - AppController: Central business logic coordinator
    - AppConfig: Application configuration
    - ConversionSession: Conversion state machine
    - NavigationController: Active view selection
"""

from .config import AppConfig
from .controller import AppController
from .events import (
    AppEvent,
    EventType,
    LogEvent,
    ProgressEvent,
    SessionStatus,
    StateEvent,
)
from .navigation import NavigationController, ShortcutGate, View
from .session import ConversionSession

__all__ = [
    "AppConfig",
    "AppController",
    "ConversionSession",
    "NavigationController",
    "ShortcutGate",
    "View",
    "AppEvent",
    "EventType",
    "SessionStatus",
    "ProgressEvent",
    "LogEvent",
    "StateEvent",
]
