"""
Settings view: output format, quality, folder, naming, theme and accent.
"""

from __future__ import annotations

from typing import Any, Optional

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Input, Select, Static, Switch

from pagepix.app.settings import Settings
from pagepix.models import ImageFormat, NamingPattern
from pagepix.ui.theme import ACCENT_PRESETS, ThemeMode, is_hex_color

MIN_QUALITY = 10
MAX_QUALITY = 100
CUSTOM_ACCENT = "custom"

FORMAT_OPTIONS = [(fmt.value.upper(), fmt.value) for fmt in ImageFormat]
NAMING_OPTIONS = [(f"{p.label}  ({p.template})", p.value) for p in NamingPattern]
THEME_OPTIONS = [(mode.value.capitalize(), mode.value) for mode in ThemeMode]
ACCENT_OPTIONS = [(label, value) for label, value in ACCENT_PRESETS] + [("Custom", CUSTOM_ACCENT)]


def parse_quality(raw: str) -> Optional[int]:
    """Quality from user input, or None when not an integer in range."""
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    if value < MIN_QUALITY or value > MAX_QUALITY:
        return None
    return value


def accent_option(accent: str) -> str:
    if not isinstance(accent, str):
        return CUSTOM_ACCENT
    for _, value in ACCENT_PRESETS:
        if value.upper() == accent.upper():
            return value
    return CUSTOM_ACCENT


class SettingsView(Container):
    """Edits Settings; every accepted edit is posted as a Changed message."""

    class Changed(Message):
        """A settings patch the user made."""

        def __init__(self, patch: dict[str, Any]) -> None:
            super().__init__()
            self.patch = patch

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="settings-form"):
            yield Static("Settings", classes="title")
            yield Static("Output format", classes="label")
            yield Select(FORMAT_OPTIONS, allow_blank=False, id="format-select")
            yield Static("JPEG quality (10-100)", classes="label")
            yield Input(type="integer", id="jpeg-quality-input")
            yield Static("WebP quality (10-100)", classes="label")
            yield Input(type="integer", id="webp-quality-input")
            yield Static("Output folder", classes="label")
            with Horizontal(classes="row"):
                yield Input(placeholder="Same folder as the PDF", id="output-dir-input")
                yield Button("Browse", id="browse-output")
                yield Button("Reset", id="reset-output")
            yield Static("File naming", classes="label")
            yield Select(NAMING_OPTIONS, allow_blank=False, id="naming-select")
            yield Static("Theme", classes="label")
            yield Select(THEME_OPTIONS, allow_blank=False, id="theme-select")
            yield Static("Open folder when done", classes="label")
            yield Switch(id="auto-open-switch")
            yield Static("Accent color", classes="label")
            yield Select(ACCENT_OPTIONS, allow_blank=False, id="accent-select")
            yield Input(placeholder="#3B82F6", id="accent-input")
            yield Static("", id="settings-error", classes="error")
            with Horizontal(classes="row"):
                yield Button("Back (esc)", id="settings-back", classes="-primary")

    def load(self, settings: Settings) -> None:
        """Show ``settings`` without posting Changed messages."""
        with self.prevent(Select.Changed, Input.Changed, Switch.Changed):
            self._select("#format-select", settings.format, FORMAT_OPTIONS)
            self.query_one("#jpeg-quality-input", Input).value = str(settings.jpeg_quality)
            self.query_one("#webp-quality-input", Input).value = str(settings.webp_quality)
            self.query_one("#output-dir-input", Input).value = str(settings.output_directory)
            self._select("#naming-select", settings.naming_pattern, NAMING_OPTIONS)
            self._select("#theme-select", settings.theme, THEME_OPTIONS)
            self.query_one("#auto-open-switch", Switch).value = bool(settings.auto_open_folder)
            self.query_one("#accent-select", Select).value = accent_option(settings.accent_color)
            self.query_one("#accent-input", Input).value = str(settings.accent_color)
        self.show_error("")

    def _select(self, selector: str, value: Any, options: list) -> None:
        # Values stored unvalidated through update() may not be options.
        value = getattr(value, "value", value)
        if any(option == value for _, option in options):
            self.query_one(selector, Select).value = value

    def show_error(self, message: str) -> None:
        self.query_one("#settings-error", Static).update(message)

    def _post(self, **patch: Any) -> None:
        self.show_error("")
        self.post_message(self.Changed(patch))

    def on_select_changed(self, event: Select.Changed) -> None:
        event.stop()
        if event.value is Select.BLANK:
            return
        value = str(event.value)
        select_id = event.select.id
        if select_id == "format-select":
            self._post(format=value)
        elif select_id == "naming-select":
            self._post(naming_pattern=value)
        elif select_id == "theme-select":
            self._post(theme=value)
        elif select_id == "accent-select" and value != CUSTOM_ACCENT:
            with self.prevent(Input.Changed):
                self.query_one("#accent-input", Input).value = value
            self._post(accent_color=value)

    def on_input_changed(self, event: Input.Changed) -> None:
        input_id = event.input.id
        if input_id not in ("jpeg-quality-input", "webp-quality-input"):
            return
        event.stop()
        quality = parse_quality(event.value)
        if quality is None:
            self.show_error(f"Quality must be a whole number from {MIN_QUALITY} to {MAX_QUALITY}")
            return
        field = "jpeg_quality" if input_id == "jpeg-quality-input" else "webp_quality"
        self._post(**{field: quality})

    def on_input_submitted(self, event: Input.Submitted) -> None:
        input_id = event.input.id
        if input_id == "output-dir-input":
            event.stop()
            self._post(output_directory=event.value.strip())
        elif input_id == "accent-input":
            event.stop()
            value = event.value.strip()
            if not is_hex_color(value):
                self.show_error("Accent must be a hex color like #3B82F6")
                return
            value = value.upper()
            with self.prevent(Select.Changed):
                self.query_one("#accent-select", Select).value = accent_option(value)
            self._post(accent_color=value)

    def on_switch_changed(self, event: Switch.Changed) -> None:
        event.stop()
        self._post(auto_open_folder=event.value)

    def show_output_directory(self, path: str) -> None:
        with self.prevent(Input.Changed):
            self.query_one("#output-dir-input", Input).value = path
