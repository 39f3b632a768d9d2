"""Best-effort durable log handler.

The history ledger writes every forwarding outcome to a JSONL file, but a
full disk, a revoked permission or a deleted directory must never turn into
a failed forward. This handler is the "best-effort durability" mode:

- Write failures are reported to the system logger, then dropped.
- The stream is discarded after a failure, so the next record reopens the
  file (recovers from a log directory that was removed and recreated).
- The file is opened lazily on first write, so construction never fails
  because of the log file itself.
"""

from __future__ import annotations

__all__ = ["BestEffortFileHandler"]

import logging
import sys

from hookgate.telemetry.system_logger import get_system_logger


class BestEffortFileHandler(logging.FileHandler):
    """Append-only file handler whose write failures never propagate."""

    def __init__(self, filename: str, encoding: str = "utf-8") -> None:
        """Initialize the handler without opening the file.

        Args:
            filename: Path to the JSONL file (always opened in append mode).
            encoding: File encoding.
        """
        super().__init__(filename, mode="a", encoding=encoding, delay=True)
        self._failure_count = 0

    @property
    def failure_count(self) -> int:
        """Number of records dropped because the write failed."""
        return self._failure_count

    def emit(self, record: logging.LogRecord) -> None:
        # FileHandler opens a delayed stream outside StreamHandler.emit's try block
        try:
            super().emit(record)
        except OSError:
            self.handleError(record)

    def handleError(self, record: logging.LogRecord) -> None:
        """Report a failed write instead of printing a traceback.

        Always called from inside an except block, so sys.exc_info() holds
        the write error.
        """
        self._failure_count += 1
        _, error, _ = sys.exc_info()

        # Drop the stream so the next emit() reopens the file
        stream = self.stream
        self.stream = None  # type: ignore[assignment]
        if stream is not None:
            try:
                stream.close()
            except OSError:
                pass

        get_system_logger().warning(
            {
                "event": "history_write_failed",
                "message": f"Could not write history entry to {self.baseFilename}",
                "path": self.baseFilename,
                "error": str(error) if error else None,
                "error_type": type(error).__name__ if error else None,
                "failure_count": self._failure_count,
            }
        )
