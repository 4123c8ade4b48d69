"""
Application Configuration
=========================
Process-level configuration for PagePix (paths, logging, polling).

User-facing preferences live in pagepix.app.settings and are persisted
through the key-value store; this module only covers what the launcher
decides before the UI starts.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class AppConfig:
    """
    Application configuration.

    Attributes:
        data_dir: Directory for application data (database, log file)
        db_path: Path to the SQLite key-value database
        log_path: Path to the log file
        log_level: Logging level name
        appearance_poll_interval: Seconds between system color-scheme checks
    """

    data_dir: Path = field(default_factory=lambda: Path.home() / ".pagepix")
    db_path: Optional[Path] = None
    log_path: Optional[Path] = None
    log_level: str = "INFO"
    appearance_poll_interval: float = 2.0

    def __post_init__(self):
        """Ensure the data directory exists and set defaults."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if self.db_path is None:
            self.db_path = self.data_dir / "pagepix.db"
        if self.log_path is None:
            self.log_path = self.data_dir / "pagepix.log"

    @classmethod
    def from_dict(cls, config_dict: dict) -> "AppConfig":
        """
        Create config from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            AppConfig instance
        """
        path_fields = {"data_dir", "db_path", "log_path"}
        processed = {}

        for key, value in config_dict.items():
            if key in path_fields and value is not None:
                processed[key] = Path(value)
            else:
                processed[key] = value

        return cls(**processed)

    def to_dict(self) -> dict:
        """
        Convert config to dictionary.

        Returns:
            Configuration dictionary
        """
        return {
            "data_dir": str(self.data_dir),
            "db_path": str(self.db_path) if self.db_path else None,
            "log_path": str(self.log_path) if self.log_path else None,
            "log_level": self.log_level,
            "appearance_poll_interval": self.appearance_poll_interval,
        }
