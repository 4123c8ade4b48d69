"""Display formatting for sizes and timestamps."""

from __future__ import annotations

import time
from typing import Optional


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def time_ago(timestamp: float, now: Optional[float] = None) -> str:
    """Relative age of an epoch-seconds timestamp (``5m ago``)."""
    if now is None:
        now = time.time()
    seconds = max(0, int(now - timestamp))
    minutes = seconds // 60
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"
