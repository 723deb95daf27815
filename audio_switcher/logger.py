"""
Logging setup for the idle audio switcher.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

_LOG_INITIALISED = False
LOG_DIR_ENV = "IDLE_AUDIO_SWITCHER_LOG_DIR"
DEFAULT_LOG_DIR = Path.home() / "AppData" / "Local" / "Idle Audio Switcher"
LOG_FILENAME = "switcher.log"


def _default_log_path() -> Path:
    override = os.environ.get(LOG_DIR_ENV)
    base = Path(override) if override else DEFAULT_LOG_DIR
    return base / LOG_FILENAME


def configure(log_path: Optional[Path] = None, *, verbose: bool = False, force: bool = False) -> None:
    """
    Configure loguru for the application.

    Runs once per process unless ``force`` is given, which the entry point
    uses to apply command-line choices after modules have already logged.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED and not force:
        return
    target = log_path or _default_log_path()
    target.parent.mkdir(parents=True, exist_ok=True)

    # Keep console output and add a persistent file sink.
    _logger.remove()
    if sys.stderr is not None:
        _logger.add(
            sys.stderr,
            level="DEBUG" if verbose else "INFO",
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
            enqueue=True,
        )
    _logger.add(
        target,
        level="DEBUG",
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    configure()
    return _logger
