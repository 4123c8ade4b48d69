"""
Textual terminal UI for PagePix.
"""

from pagepix.tui.app import LaunchOptions, PagePixTUI

__all__ = ["LaunchOptions", "PagePixTUI"]
