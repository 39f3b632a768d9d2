"""History ledger.

Two views of the same entries:
- Durable: one JSON line per entry appended to history.jsonl. Never
  rewritten, truncated or compacted. Writes are best-effort: a failure is
  reported to the system logger and the forward carries on.
- In memory: one deque per route key, newest first, capped at max_per_key.
  Lost on restart; the durable log is not replayed.

All buffer operations run on the event loop thread, so appends from
concurrent forwards never interleave within an entry and keys need no
shared lock.
"""

from __future__ import annotations

__all__ = ["HistoryLedger"]

import logging
from collections import deque
from itertools import islice
from pathlib import Path

from hookgate.constants import APP_NAME, DEFAULT_HISTORY_LIMIT, DEFAULT_HISTORY_MAX
from hookgate.history.models import HistoryEntry
from hookgate.utils.logging.logger_setup import setup_best_effort_logger

HISTORY_LOGGER_NAME = f"{APP_NAME}.history"


class HistoryLedger:
    """Append-only forwarding history with a bounded per-key view."""

    def __init__(self, log_path: Path | None, max_per_key: int = DEFAULT_HISTORY_MAX) -> None:
        """Initialize the ledger.

        Args:
            log_path: Durable JSONL log. None keeps history in memory only.
            max_per_key: In-memory capacity per route key.

        Raises:
            ValueError: If max_per_key is less than 1.
            OSError: If the log directory cannot be created.
        """
        if max_per_key < 1:
            raise ValueError("max_per_key must be at least 1")

        self._capacity = max_per_key
        self._log_path = log_path
        self._buffers: dict[str, deque[HistoryEntry]] = {}
        self._durable: logging.Logger | None = None
        if log_path is not None:
            self._durable = setup_best_effort_logger(HISTORY_LOGGER_NAME, log_path)

    @property
    def capacity(self) -> int:
        """Maximum entries kept in memory per key."""
        return self._capacity

    @property
    def log_path(self) -> Path | None:
        """Durable log location, or None when in-memory only."""
        return self._log_path

    def append(self, entry: HistoryEntry) -> None:
        """Record an entry durably (best effort) and in the key's buffer.

        Evicts the key's oldest buffered entry when the buffer is full.
        """
        if self._durable is not None:
            self._durable.info(entry.model_dump(mode="json"))

        buffer = self._buffers.get(entry.key)
        if buffer is None:
            buffer = self._buffers[entry.key] = deque(maxlen=self._capacity)
        buffer.appendleft(entry)

    def query(self, key: str, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]:
        """Return up to limit buffered entries for key, newest first."""
        buffer = self._buffers.get(key)
        if not buffer or limit < 1:
            return []
        return list(islice(buffer, limit))

    def clear(self, key: str) -> int:
        """Empty the in-memory buffer for key. The durable log is untouched.

        Returns:
            Number of entries removed.
        """
        buffer = self._buffers.pop(key, None)
        return len(buffer) if buffer else 0

    def keys(self) -> list[str]:
        """Route keys that currently have buffered entries."""
        return list(self._buffers)

    def close(self) -> None:
        """Flush and close the durable log handler."""
        if self._durable is None:
            return
        for handler in self._durable.handlers:
            handler.close()
        self._durable.handlers.clear()
        self._durable = None
