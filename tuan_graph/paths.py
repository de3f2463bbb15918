"""Centralized path management and logging setup for tuan.

All tuan-related files live under ~/.tuan/ (or $TUAN_HOME):
- ~/.tuan/debug/        - Rotating log files
- ~/.tuan/debug/debug   - If present, enable debug logging

Library modules only ever call ``logging.getLogger("tuan.<name>")``; the
handler is attached once by the CLI through :func:`configure_logger`.
"""

import logging
import os
from pathlib import Path

LOG_FILE_NAME = "tuan.log"


def tuan_home() -> Path:
    """Return the tuan home directory (~/.tuan/ or $TUAN_HOME)."""
    override = os.environ.get("TUAN_HOME")
    d = Path(override) if override else Path.home() / ".tuan"
    d.mkdir(parents=True, exist_ok=True)
    return d


def debug_dir() -> Path:
    """Return the debug/logs directory (~/.tuan/debug/)."""
    d = tuan_home() / "debug"
    d.mkdir(parents=True, exist_ok=True)
    return d


def debug_enabled() -> bool:
    """Check if debug mode is enabled.

    Debug mode is on when TUAN_DEBUG is set to a truthy value, or when the
    ~/.tuan/debug/debug marker file exists.
    """
    env = os.environ.get("TUAN_DEBUG", "").strip().lower()
    if env:
        return env in ("1", "true", "yes", "on")
    return (debug_dir() / "debug").exists()


def set_debug(enabled: bool = True) -> None:
    """Enable or disable the debug marker file."""
    marker = debug_dir() / "debug"
    if enabled:
        marker.touch()
    elif marker.exists():
        marker.unlink()


def log_file() -> Path:
    """Return the path of the rotating log file."""
    return debug_dir() / LOG_FILE_NAME


def configure_logger(name: str, log_path: Path | None = None,
                     max_bytes: int = 10_000_000) -> logging.Logger:
    """Configure a logger that always writes to file with rotation.

    Args:
        name: Logger name (e.g., "tuan"). Child loggers such as
              "tuan.layout" propagate into it.
        log_path: Optional file override. If None, uses
                  ~/.tuan/debug/tuan.log
        max_bytes: Maximum log file size before rotation (default 10MB)

    Returns:
        Configured logger instance
    """
    from logging.handlers import RotatingFileHandler

    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    handler = RotatingFileHandler(
        log_path or log_file(),
        maxBytes=max_bytes,
        backupCount=1,
    )
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.propagate = False

    if debug_enabled():
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    return logger
