"""
Terminal theme colors and Textual theme construction.

The accent palette comes from Settings.accent_color; everything else is a
fixed light or dark base.
"""

from __future__ import annotations

from textual.theme import Theme

from pagepix.ui.theme import AccentPalette, ResolvedTheme

# Dark base
SLATE_950 = "#0B1120"
SLATE_900 = "#0F172A"
SLATE_800 = "#1E293B"
SLATE_100 = "#F1F5F9"

# Light base
WHITE = "#FFFFFF"
GRAY_50 = "#F8FAFC"
GRAY_200 = "#E2E8F0"
GRAY_900 = "#111827"

# Status colors
GREEN = "#10B981"
AMBER = "#F59E0B"
RED = "#EF4444"


def theme_name(resolved: ResolvedTheme, palette: AccentPalette) -> str:
    return f"pagepix-{resolved.value}-{palette.base[1:].lower()}"


def build_theme(resolved: ResolvedTheme, palette: AccentPalette) -> Theme:
    """Textual theme for a resolved mode and accent palette."""
    dark = resolved is ResolvedTheme.DARK
    return Theme(
        name=theme_name(resolved, palette),
        primary=palette.base,
        secondary=palette.hover,
        accent=palette.light,
        warning=AMBER,
        error=RED,
        success=GREEN,
        foreground=SLATE_100 if dark else GRAY_900,
        background=SLATE_950 if dark else GRAY_50,
        surface=SLATE_900 if dark else WHITE,
        panel=SLATE_800 if dark else GRAY_200,
        dark=dark,
        variables={
            "accent-hover": palette.hover,
            "accent-light": palette.light,
        },
    )
