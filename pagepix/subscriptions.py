"""
Subscription Handles
====================
Listener registration with explicit, idempotent release.

Every listen/subscribe call in PagePix returns a Subscription. Releasing it
is safe to repeat, and once released the listener is never invoked again.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Optional, TypeVar

L = TypeVar("L", bound=Callable[..., Any])


class Subscription:
    """Handle for one registered listener."""

    def __init__(self, on_release: Optional[Callable[[], None]] = None):
        self._on_release = on_release
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def release(self) -> bool:
        """
        Detach the listener.

        Returns:
            True on the first call, False on every later call
        """
        with self._lock:
            if not self._active:
                return False
            self._active = False
            on_release, self._on_release = self._on_release, None
        if on_release is not None:
            on_release()
        return True

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class SubscriptionGroup:
    """A set of subscriptions torn down together."""

    def __init__(self, subscriptions: Optional[list[Subscription]] = None):
        self._subscriptions: list[Subscription] = list(subscriptions or [])
        self._released = False

    @property
    def active(self) -> bool:
        return not self._released

    def add(self, subscription: Subscription) -> Subscription:
        if self._released:
            subscription.release()
        else:
            self._subscriptions.append(subscription)
        return subscription

    def release(self) -> bool:
        """Release every member; later calls are no-ops."""
        if self._released:
            return False
        self._released = True
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.release()
        return True


class ListenerRegistry(Generic[L]):
    """
    Thread-safe list of listeners.

    notify() works on a snapshot and re-checks each handle right before the
    call, so a listener released mid-notification is skipped.
    """

    def __init__(self):
        self._entries: list[tuple[Subscription, L]] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: L) -> Subscription:
        holder: list[tuple[Subscription, L]] = []

        def _remove() -> None:
            with self._lock:
                if holder and holder[0] in self._entries:
                    self._entries.remove(holder[0])

        subscription = Subscription(_remove)
        holder.append((subscription, listener))
        with self._lock:
            self._entries.append(holder[0])
        return subscription

    def notify(self, *args: Any) -> int:
        """
        Call every active listener with ``args``.

        Returns:
            Number of listeners invoked
        """
        with self._lock:
            snapshot = list(self._entries)
        called = 0
        for subscription, listener in snapshot:
            if subscription.active:
                listener(*args)
                called += 1
        return called

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
