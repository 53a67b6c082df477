"""Shared utility functions for the Tally Document Bridge."""

import logging
import time
from datetime import UTC, date, datetime
from pathlib import Path

import colorlog

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project.

    Only the top-level project logger (``tally-bridge``) owns handlers; child loggers propagate to it.
    """
    project = logging.getLogger(name.split(".", 1)[0])
    if not project.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s" + LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        project.addHandler(handler)
    project.propagate = False
    return logging.getLogger(name)


def ensure_dir(path: str | Path) -> None:
    """Ensure a directory exists (like mkdir -p)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def safe_cast(val: object, to_type: type, default: object = None) -> object:
    """Safely cast a value to a type, returning default on failure."""
    try:
        return to_type(val)
    except (ValueError, TypeError):
        return default


def utcnow_iso() -> str:
    """Get the current UTC time as an ISO8601 string."""
    return datetime.now(UTC).isoformat()


def today_iso() -> str:
    """Get today's date as YYYY-MM-DD."""
    return date.today().isoformat()


def epoch_millis() -> int:
    """Milliseconds since the epoch."""
    return time.time_ns() // 1_000_000
