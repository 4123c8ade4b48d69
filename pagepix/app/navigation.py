"""
Navigation
==========
Active-view selection for the four PagePix views and keyboard-shortcut gating.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from pagepix.app.events import SessionStatus
from pagepix.subscriptions import ListenerRegistry, Subscription

logger = logging.getLogger(__name__)

# Repeats of the same key inside this window come from a held key
KEY_REPEAT_WINDOW = 0.15


class View(str, Enum):
    HOME = "home"
    PROCESSING = "processing"
    COMPLETE = "complete"
    SETTINGS = "settings"


class Shortcut(str, Enum):
    OPEN_FILE = "open_file"
    ESCAPE = "escape"


_VIEW_FOR_STATUS = {
    SessionStatus.IDLE: View.HOME,
    SessionStatus.READY: View.PROCESSING,
    SessionStatus.CONVERTING: View.PROCESSING,
    SessionStatus.FAILED: View.PROCESSING,
    SessionStatus.COMPLETE: View.COMPLETE,
}

_SHORTCUT_VIEWS = {
    Shortcut.OPEN_FILE: {View.HOME, View.COMPLETE},
    Shortcut.ESCAPE: {View.SETTINGS},
}


def view_for_status(status: SessionStatus) -> View:
    return _VIEW_FOR_STATUS[SessionStatus(status)]


def collapse_return_view(view: Optional[View]) -> View:
    """Settings only ever returns to complete or home."""
    return View.COMPLETE if view is View.COMPLETE else View.HOME


class NavigationController:
    """
    Tracks the active view.

    Session status changes pick the view. While settings is open they
    only update the view that leaving settings returns to.
    """

    def __init__(self, initial: View = View.HOME):
        self._view = initial
        self._return_view: Optional[View] = None
        self._listeners: ListenerRegistry[Callable[[View], None]] = ListenerRegistry()

    @property
    def view(self) -> View:
        return self._view

    @property
    def return_view(self) -> Optional[View]:
        return self._return_view

    def subscribe(self, listener: Callable[[View], None]) -> Subscription:
        """Called with the new view after every change."""
        return self._listeners.subscribe(listener)

    def open_settings(self) -> bool:
        if self._view is View.SETTINGS:
            return False
        self._return_view = self._view
        self._set_view(View.SETTINGS)
        return True

    def close_settings(self) -> bool:
        """Leave settings for the recorded view (complete or home)."""
        if self._view is not View.SETTINGS:
            return False
        target = collapse_return_view(self._return_view)
        self._return_view = None
        self._set_view(target)
        return True

    def on_session_status(self, status: SessionStatus) -> View:
        target = view_for_status(status)
        if self._view is View.SETTINGS:
            self._return_view = target
        else:
            self._set_view(target)
        return self._view

    def shortcut_allowed(self, shortcut: Shortcut) -> bool:
        return self._view in _SHORTCUT_VIEWS[Shortcut(shortcut)]

    def _set_view(self, view: View) -> None:
        if view is self._view:
            return
        logger.debug("View %s -> %s", self._view.value, view.value)
        self._view = view
        self._listeners.notify(view)


class ShortcutGate:
    """
    Edge-triggered key handling.

    Terminals deliver a held key as a stream of presses; a press of the
    same key within ``window`` seconds of the previous one is treated as
    part of the same hold.
    """

    def __init__(
        self,
        window: float = KEY_REPEAT_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._window = window
        self._clock = clock
        self._last: dict[str, float] = {}

    def press(self, key: str) -> bool:
        """
        Record a key press.

        Returns:
            True for a fresh press, False for an auto-repeat
        """
        now = self._clock()
        previous = self._last.get(key)
        self._last[key] = now
        return previous is None or now - previous > self._window

    def release(self, key: str) -> None:
        self._last.pop(key, None)
