"""
Textual TUI App
===============
PagePix terminal shell: home, processing, complete and settings views
driven by the application controller.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from textual import work
from textual.app import App, ComposeResult
from textual.widgets import Button, ContentSwitcher, Footer, Header, Input, OptionList

from pagepix.app import AppConfig, AppController
from pagepix.app.events import AppEvent, EventType
from pagepix.app.navigation import Shortcut, ShortcutGate, View
from pagepix.app.session import Complete
from pagepix.render.backend import RenderBackend
from pagepix.storage import KeyValueStore
from pagepix.tui.screens import (
    CompleteView,
    ConfirmScreen,
    HomeView,
    PreviewScreen,
    ProcessingView,
    SettingsView,
    ThumbnailGrid,
    TUIDialogs,
)
from pagepix.tui.screens.file_picker import normalize_path_input
from pagepix.tui.styles import APP_CSS
from pagepix.tui.theme import build_theme
from pagepix.ui.theme import AccentPalette, ResolvedTheme, SystemAppearance, TerminalAppearance

logger = logging.getLogger(__name__)


@dataclass
class LaunchOptions:
    source: Optional[Path] = None


class PagePixTUI(App):
    """Terminal PDF-to-image converter."""

    CSS = APP_CSS
    TITLE = "PagePix"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("o", "open_file", "Open PDF"),
        ("s", "open_settings", "Settings"),
        ("t", "cycle_theme", "Theme"),
        ("c", "cancel_conversion", "Cancel"),
        ("escape", "escape", "Back"),
    ]

    def __init__(
        self,
        options: Optional[LaunchOptions] = None,
        config: Optional[AppConfig] = None,
        storage: Optional[KeyValueStore] = None,
        backend: Optional[RenderBackend] = None,
        appearance: Optional[SystemAppearance] = None,
    ):
        super().__init__()
        self.options = options or LaunchOptions()
        self.controller = AppController(
            config=config,
            storage=storage,
            backend=backend,
            appearance=appearance,
            dialogs=TUIDialogs(self),
            dispatch=self._dispatch,
        )
        self.shortcuts = ShortcutGate()
        self._subscriptions = []

    def compose(self) -> ComposeResult:
        yield Header()
        with ContentSwitcher(initial=View.HOME.value, id="views"):
            yield HomeView(id=View.HOME.value, classes="view")
            yield ProcessingView(id=View.PROCESSING.value, classes="view")
            yield CompleteView(id=View.COMPLETE.value, classes="view")
            yield SettingsView(id=View.SETTINGS.value, classes="view")
        yield Footer()

    def on_mount(self) -> None:
        controller = self.controller
        self._subscriptions = [
            controller.subscribe_appearance(self._apply_appearance),
            controller.subscribe(self._on_app_event),
            controller.navigation.subscribe(self._show_view),
        ]
        controller.startup()

        self.query_one(HomeView).show_recent(controller.history)
        self.query_one(SettingsView).load(controller.settings)

        if isinstance(controller.appearance, TerminalAppearance):
            self.set_interval(controller.config.appearance_poll_interval, controller.appearance.poll)

        if self.options.source:
            message = controller.drop_path(self.options.source)
            if message:
                self.query_one(HomeView).show_error(message)

    def on_unmount(self) -> None:
        for subscription in self._subscriptions:
            subscription.release()
        self.controller.cleanup()

    def _dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        # Backend events arrive on the render thread
        if threading.current_thread() is threading.main_thread():
            fn(*args)
        else:
            self.call_from_thread(fn, *args)

    # ==================== Controller callbacks ====================

    def _apply_appearance(self, resolved: ResolvedTheme, palette: AccentPalette) -> None:
        theme = build_theme(resolved, palette)
        if theme.name not in self.available_themes:
            self.register_theme(theme)
        self.theme = theme.name

    def _show_view(self, view: View) -> None:
        self.query_one(ContentSwitcher).current = view.value

    def _on_app_event(self, event: AppEvent) -> None:
        if event.event_type == EventType.PROGRESS:
            self.query_one(ProcessingView).show_progress(event)
        elif event.event_type == EventType.LOG:
            if event.level == "warning":
                logger.debug("Session warning: %s", event.message)
        elif event.event_type == EventType.STATE:
            self._render_state()

    def _render_state(self) -> None:
        state = self.controller.session.state
        self.query_one(ProcessingView).show_state(state)
        if isinstance(state, Complete):
            self.query_one(CompleteView).show_result(
                state.filename, state.result, self.controller.session.progress.pages
            )
            self.query_one(HomeView).show_recent(self.controller.history)
        else:
            self.query_one(HomeView).clear_input()

    # ==================== Actions ====================

    def _shortcut(self, shortcut: Shortcut, key: str) -> bool:
        if not self.shortcuts.press(key):
            return False
        return self.controller.navigation.shortcut_allowed(shortcut)

    def action_open_file(self) -> None:
        if not self._shortcut(Shortcut.OPEN_FILE, "o"):
            return
        self.browse_for_pdf()

    def action_escape(self) -> None:
        if not self._shortcut(Shortcut.ESCAPE, "escape"):
            return
        self.controller.navigation.close_settings()

    def action_open_settings(self) -> None:
        self.query_one(SettingsView).load(self.controller.settings)
        self.controller.navigation.open_settings()

    def action_cycle_theme(self) -> None:
        self.controller.cycle_theme()
        self.query_one(SettingsView).load(self.controller.settings)

    def action_cancel_conversion(self) -> None:
        self.controller.cancel()

    @work(exclusive=True, group="dialogs")
    async def browse_for_pdf(self) -> None:
        await self.controller.browse_for_pdf()

    @work(exclusive=True, group="dialogs")
    async def browse_output_directory(self) -> None:
        path = await self.controller.browse_output_directory()
        if path is not None:
            self.query_one(SettingsView).show_output_directory(path)

    @work(exclusive=True, group="dialogs")
    async def confirm_clear_history(self) -> None:
        confirmed = await self.push_screen_wait(
            ConfirmScreen(
                "Clear history?",
                "This removes every recent conversion from the list.",
                confirm_label="Clear",
            )
        )
        if confirmed:
            self.controller.clear_history()
            self.query_one(HomeView).show_recent(self.controller.history)

    # ==================== Widget events ====================

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        controller = self.controller
        if button_id == "browse":
            self.browse_for_pdf()
        elif button_id == "clear-recent":
            self.confirm_clear_history()
        elif button_id == "start-conversion":
            controller.start(self.query_one(ProcessingView).page_range)
        elif button_id == "ready-home" or button_id == "failed-home":
            controller.go_home()
        elif button_id == "cancel-conversion":
            controller.cancel()
        elif button_id == "retry":
            controller.retry()
        elif button_id == "open-folder":
            state = controller.session.state
            if isinstance(state, Complete):
                controller.open_folder(state.result.output_dir)
        elif button_id == "convert-another":
            controller.convert_another()
        elif button_id == "browse-output":
            self.browse_output_directory()
        elif button_id == "reset-output":
            controller.update_settings(output_directory="")
            self.query_one(SettingsView).show_output_directory("")
        elif button_id == "settings-back":
            controller.navigation.close_settings()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "drop-input":
            value = event.value.strip()
            if not value:
                return
            message = self.controller.drop_path(normalize_path_input(value))
            if message:
                self.query_one(HomeView).show_error(message)
        elif event.input.id == "page-range-input":
            self.controller.start(event.value)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_list.id != "recent-list":
            return
        entry = self.query_one(HomeView).recent_at(event.option_index)
        if entry is None:
            return
        if not self.controller.rerun(entry):
            self.query_one(HomeView).show_error(f"Source of {entry.filename} is unknown")

    def on_thumbnail_grid_selected(self, message: ThumbnailGrid.Selected) -> None:
        if message.pages:
            self.push_screen(PreviewScreen(message.pages, message.index))

    def on_settings_view_changed(self, message: SettingsView.Changed) -> None:
        view = self.query_one(SettingsView)
        try:
            self.controller.update_settings(**message.patch)
        except ValueError as e:
            view.show_error(str(e))
