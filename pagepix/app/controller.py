"""
Application Controller
======================
Central controller for PagePix business logic.

Composes the stores, theme resolver, conversion session, navigation,
dialogs and render backend so the TUI only forwards user actions and
renders state.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pagepix.app.config import AppConfig
from pagepix.app.dialogs import DialogService, NullDialogs
from pagepix.app.events import AppEvent, EventType, SessionStatus
from pagepix.app.history import HistoryStore, RecentConversion
from pagepix.app.navigation import NavigationController
from pagepix.app.session import Complete, ConversionSession, Dispatch, Idle
from pagepix.app.settings import Settings, SettingsStore
from pagepix.errors import BackendError
from pagepix.render.backend import RenderBackend
from pagepix.storage import KeyValueStore, SQLiteKeyValueStore
from pagepix.subscriptions import ListenerRegistry, Subscription
from pagepix.ui.theme import (
    AccentPalette,
    ResolvedTheme,
    SystemAppearance,
    TerminalAppearance,
    ThemeMode,
    ThemeResolver,
    derive_accent_palette,
    is_hex_color,
)

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"
ONLY_PDF_MESSAGE = "Only PDF files are supported"

AppearanceListener = Callable[[ResolvedTheme, AccentPalette], None]


class AppController:
    """
    Central controller for the PagePix application.

    Responsibilities:
        - Settings, history and theme persistence
        - Conversion session commands (select, start, cancel, retry)
        - View selection
        - Folder opening, including auto-open on completion

    Example:
        controller = AppController(config)
        controller.startup()
        controller.select_pdf(Path("report.pdf"))
        controller.start("1-5")
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        storage: Optional[KeyValueStore] = None,
        backend: Optional[RenderBackend] = None,
        appearance: Optional[SystemAppearance] = None,
        dialogs: Optional[DialogService] = None,
        dispatch: Optional[Dispatch] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the application controller.

        Args:
            config: Application configuration
            storage: Key-value store (creates SQLiteKeyValueStore if None)
            backend: Render backend (creates PyMuPDFBackend if None)
            appearance: System color-scheme provider
            dialogs: File/directory pickers
            dispatch: Marshals backend events onto the UI loop
            clock: Epoch-seconds clock for history timestamps
        """
        self.config = config or AppConfig()
        self.storage = storage or SQLiteKeyValueStore(self.config.db_path)
        if backend is None:
            from pagepix.render.pymupdf_backend import PyMuPDFBackend

            backend = PyMuPDFBackend()
        self.backend = backend
        self.appearance = appearance or TerminalAppearance()
        self.dialogs = dialogs or NullDialogs()

        self.settings_store = SettingsStore(self.storage)
        self.history_store = HistoryStore(self.storage)
        self.theme = ThemeResolver(self.storage, self.appearance, apply=self._on_theme_applied)
        self.session = ConversionSession(
            self.backend,
            self.settings_store,
            self.history_store,
            dispatch=dispatch,
            clock=clock,
        )
        self.navigation = NavigationController()

        self._palette = derive_accent_palette(self.settings_store.settings.accent_color)
        self._appearance_listeners: ListenerRegistry[AppearanceListener] = ListenerRegistry()
        self._session_subscription = self.session.subscribe(self._on_session_event)

    # ==================== Lifecycle ====================

    def startup(self) -> None:
        """Load persisted state, apply the theme and follow system changes."""
        self.settings_store.load()
        self.history_store.load()
        self._palette = derive_accent_palette(self.settings_store.settings.accent_color)
        self.theme.load()
        self.theme.start()

    def cleanup(self):
        """
        Clean up resources.

        Call this when shutting down the application.
        """
        self.theme.stop()
        if self.session.status is SessionStatus.CONVERTING:
            self.session.cancel()
        self.session.reset()

    # ==================== Accessors ====================

    @property
    def settings(self) -> Settings:
        return self.settings_store.settings

    @property
    def history(self) -> list[RecentConversion]:
        return self.history_store.entries

    @property
    def palette(self) -> AccentPalette:
        return self._palette

    def subscribe_appearance(self, listener: AppearanceListener) -> Subscription:
        """Called with the resolved theme and accent palette whenever either changes."""
        return self._appearance_listeners.subscribe(listener)

    def subscribe(self, listener: Callable[[AppEvent], None]) -> Subscription:
        """Session events (state, progress, log)."""
        return self.session.subscribe(listener)

    # ==================== File Selection ====================

    def select_pdf(self, path: Union[str, Path]) -> bool:
        """
        Select a source PDF.

        From the complete view this starts over with the new file.

        Returns:
            True if the session moved to Ready
        """
        if isinstance(self.session.state, Complete):
            self.session.convert_another()
        if not isinstance(self.session.state, Idle):
            logger.debug("Ignoring file selection while %s", self.session.status.value)
            return False
        return self.session.select_file(Path(path))

    async def browse_for_pdf(self) -> bool:
        """Open the file dialog; a dismissed dialog changes nothing."""
        path = await self.dialogs.pick_pdf()
        if path is None:
            return False
        return self.select_pdf(path)

    def drop_path(self, path: Union[str, Path]) -> Optional[str]:
        """
        Accept a dropped or typed path.

        Returns:
            None when accepted, else a message for the user
        """
        path = Path(path)
        if path.suffix.lower() != PDF_SUFFIX:
            return ONLY_PDF_MESSAGE
        self.select_pdf(path)
        return None

    def rerun(self, entry: RecentConversion) -> bool:
        """Select a history entry's source again; legacy entries have none."""
        if not entry.can_rerun:
            logger.info("History entry %s has no source path", entry.filename)
            return False
        return self.select_pdf(entry.pdf_path)

    async def browse_output_directory(self) -> Optional[str]:
        path = await self.dialogs.pick_directory()
        if path is None:
            return None
        self.update_settings(output_directory=str(path))
        return str(path)

    # ==================== Conversion ====================

    def start(self, page_range: str = "") -> bool:
        return self.session.start(page_range.strip())

    def cancel(self) -> bool:
        return self.session.cancel()

    def retry(self) -> bool:
        return self.session.retry()

    def go_home(self) -> bool:
        return self.session.go_home()

    def convert_another(self) -> bool:
        return self.session.convert_another()

    def open_folder(self, path: str) -> bool:
        try:
            self.backend.open_folder(path)
        except BackendError as e:
            logger.warning("Could not open folder %s: %s", path, e)
            return False
        return True

    # ==================== Settings & Theme ====================

    def update_settings(self, **patch: Any) -> Settings:
        """
        Patch and persist settings.

        A value the palette cannot use is stored but leaves the current
        palette in place.

        Raises:
            ValueError: If the patch names an unknown settings field
        """
        previous = self.settings_store.settings
        settings = self.settings_store.update(**patch)

        if (
            "theme" in patch
            and isinstance(settings.theme, ThemeMode)
            and settings.theme is not self.theme.mode
        ):
            self.theme.set_theme(settings.theme)
        if settings.accent_color != previous.accent_color and is_hex_color(settings.accent_color):
            self._palette = derive_accent_palette(settings.accent_color)
            self._notify_appearance(self.theme.resolved)
        return settings

    def set_theme(self, mode: Union[ThemeMode, str]) -> ResolvedTheme:
        mode = ThemeMode(mode)
        resolved = self.theme.set_theme(mode)
        if self.settings_store.settings.theme is not mode:
            self.settings_store.update(theme=mode)
        return resolved

    def cycle_theme(self) -> ThemeMode:
        mode = self.theme.cycle()
        if self.settings_store.settings.theme is not mode:
            self.settings_store.update(theme=mode)
        return mode

    def clear_history(self) -> None:
        self.history_store.clear()

    # ==================== Internals ====================

    def _on_theme_applied(self, resolved: ResolvedTheme) -> None:
        self._notify_appearance(resolved)

    def _notify_appearance(self, resolved: ResolvedTheme) -> None:
        self._appearance_listeners.notify(resolved, self._palette)

    def _on_session_event(self, event: AppEvent) -> None:
        if event.event_type != EventType.STATE:
            return

        self.navigation.on_session_status(event.status)

        state = self.session.state
        if isinstance(state, Complete) and self.settings.auto_open_folder:
            self.open_folder(state.result.output_dir)
