"""
Theme Provider
==============
Tri-state theme preference resolved against the system color scheme,
plus the accent palette derived from the user's accent color.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional

from pagepix.errors import StorageError
from pagepix.storage import KeyValueStore
from pagepix.subscriptions import ListenerRegistry, Subscription

logger = logging.getLogger(__name__)

THEME_KEY = "pagepix-theme"

HOVER_DARKEN = 0.18
LIGHT_TINT = 0.85

_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class ThemeMode(str, Enum):
    """Stored theme preference."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class ResolvedTheme(str, Enum):
    """Theme actually applied to the presentation layer."""

    LIGHT = "light"
    DARK = "dark"


# ===========================================
# System Appearance
# ===========================================

class SystemAppearance:
    """
    Host color-scheme preference.

    Subclasses implement prefers_dark(); listeners receive the new
    preference (True for dark) whenever it flips.
    """

    def __init__(self):
        self._listeners: ListenerRegistry[Callable[[bool], None]] = ListenerRegistry()

    def prefers_dark(self) -> bool:
        raise NotImplementedError

    def subscribe(self, listener: Callable[[bool], None]) -> Subscription:
        return self._listeners.subscribe(listener)

    def _notify(self, prefers_dark: bool) -> None:
        self._listeners.notify(prefers_dark)


class StaticAppearance(SystemAppearance):
    """Settable preference for tests and headless runs."""

    def __init__(self, dark: bool = False):
        super().__init__()
        self._dark = dark

    def prefers_dark(self) -> bool:
        return self._dark

    def set_dark(self, dark: bool) -> None:
        if dark == self._dark:
            return
        self._dark = dark
        self._notify(dark)


class TerminalAppearance(SystemAppearance):
    """
    Preference read from the terminal environment.

    ``PAGEPIX_COLOR_SCHEME`` (``dark``/``light``) wins; otherwise the
    background slot of ``COLORFGBG`` is used. Terminals cannot push
    changes, so the TUI calls poll() on a timer.
    """

    # COLORFGBG background indices that denote a light background
    LIGHT_BACKGROUNDS = {"7", "15"}

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        super().__init__()
        self._environ = environ if environ is not None else os.environ
        self._last = self._read()

    def _read(self) -> bool:
        override = self._environ.get("PAGEPIX_COLOR_SCHEME", "").strip().lower()
        if override in ("dark", "light"):
            return override == "dark"

        colorfgbg = self._environ.get("COLORFGBG", "")
        if colorfgbg:
            background = colorfgbg.split(";")[-1].strip()
            return background not in self.LIGHT_BACKGROUNDS

        return True

    def prefers_dark(self) -> bool:
        return self._read()

    def poll(self) -> bool:
        """
        Re-read the environment and notify listeners on change.

        Returns:
            True if the preference flipped
        """
        current = self._read()
        if current == self._last:
            return False
        self._last = current
        self._notify(current)
        return True


# ===========================================
# Theme Resolver
# ===========================================

def next_theme(mode: ThemeMode, resolved: ResolvedTheme) -> ThemeMode:
    """
    Next mode for the toggle control.

    ``system`` counts as whatever it currently resolves to, so the cycle
    only ever lands on light or dark.
    """
    current = resolved if mode is ThemeMode.SYSTEM else ResolvedTheme(mode.value)
    return ThemeMode.LIGHT if current is ResolvedTheme.DARK else ThemeMode.DARK


class ThemeResolver:
    """
    Owns the theme mode, resolves it and applies it.

    Example:
        resolver = ThemeResolver(storage, TerminalAppearance(), apply=app_apply)
        resolver.load()
        resolver.start()
        resolver.cycle()
    """

    def __init__(
        self,
        storage: KeyValueStore,
        appearance: SystemAppearance,
        apply: Optional[Callable[[ResolvedTheme], None]] = None,
    ):
        self._storage = storage
        self._appearance = appearance
        self._apply = apply
        self._mode = ThemeMode.SYSTEM
        self._subscription: Optional[Subscription] = None

    @property
    def mode(self) -> ThemeMode:
        return self._mode

    @property
    def resolved(self) -> ResolvedTheme:
        return self.resolve(self._mode)

    def set_apply(self, apply: Optional[Callable[[ResolvedTheme], None]]) -> None:
        self._apply = apply

    def resolve(self, mode: ThemeMode) -> ResolvedTheme:
        """Resolve a mode; ``system`` asks the host every time."""
        mode = ThemeMode(mode)
        if mode is ThemeMode.SYSTEM:
            return ResolvedTheme.DARK if self._appearance.prefers_dark() else ResolvedTheme.LIGHT
        return ResolvedTheme(mode.value)

    def load(self) -> ThemeMode:
        """Read the stored mode (default ``system``) and apply it."""
        self._mode = ThemeMode.SYSTEM
        try:
            raw = self._storage.get(THEME_KEY)
        except StorageError as e:
            logger.warning("Could not read theme mode: %s", e)
            raw = None

        if raw:
            try:
                self._mode = ThemeMode(raw)
            except ValueError:
                logger.warning("Ignoring stored theme mode %r", raw)

        self.apply()
        return self._mode

    def set_theme(self, mode: ThemeMode) -> ResolvedTheme:
        """Persist the raw mode and apply its resolution immediately."""
        self._mode = ThemeMode(mode)
        try:
            self._storage.set(THEME_KEY, self._mode.value)
        except StorageError as e:
            logger.warning("Could not persist theme mode: %s", e)
        return self.apply()

    def cycle(self) -> ThemeMode:
        self.set_theme(next_theme(self._mode, self.resolved))
        return self._mode

    def apply(self) -> ResolvedTheme:
        resolved = self.resolved
        if self._apply is not None:
            self._apply(resolved)
        return resolved

    def start(self) -> None:
        """Follow system preference changes while the mode is ``system``."""
        if self._subscription is None or not self._subscription.active:
            self._subscription = self._appearance.subscribe(self._on_system_change)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.release()
            self._subscription = None

    def _on_system_change(self, prefers_dark: bool) -> None:
        if self._mode is not ThemeMode.SYSTEM:
            return
        logger.debug("System color scheme changed (dark=%s)", prefers_dark)
        self.apply()


# ===========================================
# Accent Palette
# ===========================================

@dataclass(frozen=True)
class AccentPalette:
    """Accent color with its hover and light-tint variants."""

    base: str
    hover: str
    light: str


ACCENT_PRESETS = [
    ("Blue", "#3B82F6"),
    ("Violet", "#8B5CF6"),
    ("Rose", "#F43F5E"),
    ("Amber", "#F59E0B"),
    ("Emerald", "#10B981"),
    ("Cyan", "#06B6D4"),
    ("Orange", "#F97316"),
    ("Pink", "#EC4899"),
]


def is_hex_color(value: str) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def _parse_hex(value: str) -> tuple[int, int, int]:
    if not is_hex_color(value):
        raise ValueError(f"Not a hex color: {value!r}")
    digits = value[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def _to_hex(rgb: tuple[int, int, int]) -> str:
    return "#" + "".join(f"{max(0, min(255, c)):02X}" for c in rgb)


def _round(value: float) -> int:
    return int(value + 0.5)


def derive_accent_palette(accent: str) -> AccentPalette:
    """
    Derive hover (18% darker) and light (85% toward white) variants.

    Raises:
        ValueError: If ``accent`` is not a #RGB or #RRGGBB color
    """
    rgb = _parse_hex(accent)
    hover = tuple(_round(c * (1 - HOVER_DARKEN)) for c in rgb)
    light = tuple(_round(c + (255 - c) * LIGHT_TINT) for c in rgb)
    return AccentPalette(base=_to_hex(rgb), hover=_to_hex(hover), light=_to_hex(light))
