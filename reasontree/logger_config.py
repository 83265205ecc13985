# -*- coding: utf-8 -*-
"""
Logging configuration for reasontree.

All modules log through the loguru ``logger`` re-exported here. Console output
goes to stderr; when file logging is enabled each process gets its own session
directory under the log base directory:

    <base>/log_<YYYYmmdd_HHMMSS_ffffff>/reasontree.log

The base directory defaults to ``.reasontree/logs`` and can be overridden with
the ``REASONTREE_LOG_BASE_DIR`` environment variable.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_LOG_BASE_DIR = Path(".reasontree") / "logs"
LOG_FILE_NAME = "reasontree.log"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

# Session state (module globals so tests can monkeypatch them)
_LOG_BASE_SESSION_DIR: Optional[Path] = None
_LOG_SESSION_DIR: Optional[Path] = None
_CONSOLE_HANDLER_ID: Optional[int] = None
_FILE_HANDLER_ID: Optional[int] = None
_CONSOLE_LEVEL: str = "INFO"


def _get_log_base_dir() -> Path:
    """Return the root directory that holds all log sessions."""
    override = os.getenv("REASONTREE_LOG_BASE_DIR", "").strip()
    if override:
        return Path(override)
    return DEFAULT_LOG_BASE_DIR


def get_log_session_root() -> Path:
    """Return (and lazily choose) the session root directory for this process."""
    global _LOG_BASE_SESSION_DIR
    if _LOG_BASE_SESSION_DIR is None:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        _LOG_BASE_SESSION_DIR = _get_log_base_dir() / f"log_{stamp}"
    return _LOG_BASE_SESSION_DIR


def get_log_session_dir() -> Path:
    """Return the session log directory, creating it on first use."""
    global _LOG_SESSION_DIR
    if _LOG_SESSION_DIR is None:
        _LOG_SESSION_DIR = get_log_session_root()
    _LOG_SESSION_DIR.mkdir(parents=True, exist_ok=True)
    return _LOG_SESSION_DIR


def set_log_base_session_dir(session_name: str) -> None:
    """Reuse a named session directory under the log base directory."""
    global _LOG_BASE_SESSION_DIR, _LOG_SESSION_DIR
    _LOG_BASE_SESSION_DIR = _get_log_base_dir() / session_name
    _LOG_SESSION_DIR = None


def set_log_base_session_dir_absolute(path: Path) -> None:
    """Point the session directory at an absolute path (used by tests)."""
    global _LOG_BASE_SESSION_DIR, _LOG_SESSION_DIR
    _LOG_BASE_SESSION_DIR = Path(path)
    _LOG_SESSION_DIR = None


def reset_logging_session() -> None:
    """Forget the current session so the next lookup picks a fresh directory."""
    global _LOG_BASE_SESSION_DIR, _LOG_SESSION_DIR
    _LOG_BASE_SESSION_DIR = None
    _LOG_SESSION_DIR = None


def setup_logging(level: str = "INFO", log_to_file: bool = False) -> Optional[Path]:
    """Configure loguru sinks.

    Args:
        level: Minimum level for the console sink.
        log_to_file: Also write a DEBUG-level log into the session directory.

    Returns:
        Path of the log file when file logging is enabled, else None.
    """
    global _CONSOLE_HANDLER_ID, _FILE_HANDLER_ID, _CONSOLE_LEVEL

    logger.remove()
    _CONSOLE_LEVEL = level.upper()
    _CONSOLE_HANDLER_ID = logger.add(sys.stderr, level=_CONSOLE_LEVEL, format=CONSOLE_FORMAT)
    _FILE_HANDLER_ID = None

    if not log_to_file:
        return None

    log_file = get_log_session_dir() / LOG_FILE_NAME
    _FILE_HANDLER_ID = logger.add(log_file, level="DEBUG", format=FILE_FORMAT, encoding="utf-8")
    logger.info(f"[Logging] Writing session log to {log_file}")
    return log_file


def suppress_console_logging() -> None:
    """Detach the console sink (the Textual app owns the terminal)."""
    global _CONSOLE_HANDLER_ID
    if _CONSOLE_HANDLER_ID is None:
        return
    try:
        logger.remove(_CONSOLE_HANDLER_ID)
    except ValueError:
        pass
    _CONSOLE_HANDLER_ID = None


def restore_console_logging() -> None:
    """Re-attach the console sink after the Textual app exits."""
    global _CONSOLE_HANDLER_ID
    if _CONSOLE_HANDLER_ID is not None:
        return
    _CONSOLE_HANDLER_ID = logger.add(sys.stderr, level=_CONSOLE_LEVEL, format=CONSOLE_FORMAT)


__all__ = [
    "logger",
    "setup_logging",
    "get_log_session_dir",
    "get_log_session_root",
    "set_log_base_session_dir",
    "set_log_base_session_dir_absolute",
    "reset_logging_session",
    "suppress_console_logging",
    "restore_console_logging",
]
