"""
UI Module
=========
Presentation-independent UI state: theme resolution and accent palette.
"""

from .theme import (
    ACCENT_PRESETS,
    AccentPalette,
    ResolvedTheme,
    StaticAppearance,
    SystemAppearance,
    TerminalAppearance,
    ThemeMode,
    ThemeResolver,
    derive_accent_palette,
    next_theme,
)

__all__ = [
    "ACCENT_PRESETS",
    "AccentPalette",
    "ResolvedTheme",
    "StaticAppearance",
    "SystemAppearance",
    "TerminalAppearance",
    "ThemeMode",
    "ThemeResolver",
    "derive_accent_palette",
    "next_theme",
]
