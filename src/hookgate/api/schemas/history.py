"""History API schemas."""

from __future__ import annotations

__all__ = [
    "HistoryClearedResponse",
    "HistoryResponse",
]

from pydantic import BaseModel

from hookgate.history import HistoryEntry


class HistoryResponse(BaseModel):
    """Recent history for one key, newest first."""

    key: str
    count: int
    entries: list[HistoryEntry]


class HistoryClearedResponse(BaseModel):
    """History clear result (in-memory view only)."""

    cleared: bool = True
    key: str
    removed: int
