"""
TUI screens package.
"""

from pagepix.tui.screens.complete import CompleteView
from pagepix.tui.screens.confirm import ConfirmScreen
from pagepix.tui.screens.file_picker import FilePickerScreen, TUIDialogs
from pagepix.tui.screens.home import HomeView
from pagepix.tui.screens.preview import PreviewScreen
from pagepix.tui.screens.processing import ProcessingView
from pagepix.tui.screens.settings import SettingsView
from pagepix.tui.screens.thumbnails import ThumbnailGrid

__all__ = [
    "CompleteView",
    "ConfirmScreen",
    "FilePickerScreen",
    "HomeView",
    "PreviewScreen",
    "ProcessingView",
    "SettingsView",
    "ThumbnailGrid",
    "TUIDialogs",
]
