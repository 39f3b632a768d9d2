"""Logger setup utilities for creating JSONL loggers.

setup_best_effort_logger creates the durable history logger: JSONL lines with
ISO 8601 timestamps, written through a BestEffortFileHandler so that write
failures are reported and dropped, never raised into the forwarding path.
"""

from __future__ import annotations

__all__ = ["setup_best_effort_logger"]

import logging
from pathlib import Path

from hookgate.utils.file_helpers import set_secure_permissions
from hookgate.utils.logging.best_effort_handler import BestEffortFileHandler
from hookgate.utils.logging.iso_formatter import ISO8601Formatter


def _ensure_log_directory(log_file: Path) -> None:
    """Create the log directory with owner-only permissions.

    Raises:
        PermissionError: If unable to create log directory due to permissions.
        OSError: If directory creation fails for other reasons.
    """
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise PermissionError(f"Cannot create log directory {log_file.parent}: {e}") from e
    except OSError as e:
        raise OSError(f"Failed to create log directory {log_file.parent}: {e}") from e
    set_secure_permissions(log_file.parent, is_directory=True)


def setup_best_effort_logger(
    logger_name: str,
    log_file: Path,
    log_level: int = logging.INFO,
) -> logging.Logger:
    """Set up an append-only JSONL logger in best-effort durability mode.

    The file is opened lazily on the first record. Any existing handlers on
    the logger are closed first, so calling this twice for the same name
    re-points the logger instead of duplicating output.

    Args:
        logger_name: Name for the logger (e.g., "hookgate.history")
        log_file: Path to the JSONL file
        log_level: Logging level (default: INFO)

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        PermissionError: If unable to create log directory due to permissions
        OSError: If directory creation fails for other reasons
    """
    _ensure_log_directory(log_file)

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)
    logger.propagate = False  # Don't propagate to root logger

    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    file_handler = BestEffortFileHandler(str(log_file))
    file_handler.setLevel(log_level)
    file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(file_handler)

    return logger
