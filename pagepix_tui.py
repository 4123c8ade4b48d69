#!/usr/bin/env python3
"""
PagePix TUI launcher.

Usage:
    python pagepix_tui.py
    python pagepix_tui.py --source /path/to/report.pdf
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pagepix", description="PagePix PDF to image converter")
    parser.add_argument("--source", type=Path, help="Optional PDF to select on startup")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory for settings, history and logs (default: ~/.pagepix)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level for the log file (default: INFO)",
    )
    return parser


def configure_logging(log_path: Path, level: str) -> None:
    # The terminal belongs to the TUI, so logs only go to a file
    logging.basicConfig(
        filename=str(log_path),
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from pagepix.app.config import AppConfig

    config_values = {"log_level": args.log_level}
    if args.data_dir:
        config_values["data_dir"] = args.data_dir.expanduser()
    config = AppConfig.from_dict(config_values)
    configure_logging(config.log_path, config.log_level)

    try:
        from pagepix.tui.app import LaunchOptions, PagePixTUI
    except ImportError:
        print("error: Textual is not installed. Run `pip install textual rich`.", file=sys.stderr)
        return 1

    options = LaunchOptions(source=args.source.resolve() if args.source else None)
    app = PagePixTUI(options=options, config=config)
    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
