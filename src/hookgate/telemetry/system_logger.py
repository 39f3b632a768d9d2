"""System logger for operational events.

This module provides a singleton system logger for everything that isn't a
forwarding history entry (rejected forwards, route changes, reload results,
history write failures, watcher crashes).

Logging strategy:
- Console (stderr): INFO and above
- File (system.jsonl): WARNING and above only

The file handler is configured separately via configure_system_logger_file()
once the log_dir from config is available.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger_file",
    "get_system_logger",
]

import logging
import sys
from pathlib import Path

from hookgate.constants import APP_NAME
from hookgate.utils.logging.iso_formatter import ISO8601Formatter


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extracts 'message' or 'event' field from dict messages for cleaner stderr output.
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


# Module-level singleton logger
_system_logger: logging.Logger | None = None
_file_handler: logging.FileHandler | None = None


def get_system_logger() -> logging.Logger:
    """Get the singleton system logger instance.

    Creates the logger on first call with a stderr handler only.
    File handler is added later via configure_system_logger_file().

    Returns:
        logging.Logger: Configured system logger instance.

    Example:
        >>> logger = get_system_logger()
        >>> logger.warning({"event": "forward_rejected", "key": "orders"})
    """
    global _system_logger

    if _system_logger is not None:
        return _system_logger

    _system_logger = logging.getLogger(f"{APP_NAME}.system")
    _system_logger.setLevel(logging.INFO)
    _system_logger.propagate = False

    for handler in _system_logger.handlers:
        handler.close()
    _system_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.INFO)
    stderr_handler.setFormatter(ConsoleFormatter())
    _system_logger.addHandler(stderr_handler)

    return _system_logger


def configure_system_logger_file(log_path: Path, *, debug: bool = False) -> None:
    """Attach (or replace) the system logger's JSONL file handler.

    The file receives WARNING and above, or everything when debug is set.
    Failure to create the log directory is tolerated: stderr still works.

    Args:
        log_path: Path to system.jsonl (see AppConfig.system_log_path).
        debug: Also write INFO/DEBUG records to the file.
    """
    global _file_handler

    logger = get_system_logger()
    if debug:
        logger.setLevel(logging.DEBUG)

    if _file_handler is not None:
        logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        logger.warning(
            {
                "event": "system_log_unavailable",
                "message": f"System log file unavailable, logging to stderr only: {e}",
                "path": str(log_path),
            }
        )
        return

    file_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(file_handler)
    _file_handler = file_handler
