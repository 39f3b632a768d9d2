"""JSONL formatter with ISO 8601 timestamps.

Every line written by hookgate's file loggers (history and system logs)
goes through this formatter.
"""

from __future__ import annotations

__all__ = ["ISO8601Formatter", "format_timestamp"]

import json
import logging
from datetime import datetime, timezone


def format_timestamp(epoch_seconds: float) -> str:
    """Format a POSIX timestamp as UTC ISO 8601 with milliseconds.

    Example: 2025-12-04T10:48:37.123Z
    """
    return (
        datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class ISO8601Formatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Dict messages are written as-is after a leading "time" field. A "time"
    key inside the message wins over the record's creation time, so history
    entries keep the timestamp they were created with. Anything else is
    wrapped as {"message": ...}.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line.

        Args:
            record: The log record to format

        Returns:
            str: JSON-formatted log entry with timestamp
        """
        if isinstance(record.msg, dict):
            payload = record.msg
        else:
            payload = {"message": record.getMessage()}

        entry = {"time": format_timestamp(record.created), **payload}
        if record.exc_info and "traceback" not in entry:
            entry["traceback"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)
