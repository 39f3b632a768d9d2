"""History entry model."""

from __future__ import annotations

__all__ = ["HistoryEntry", "query_multimap", "utc_now_iso"]

import time
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from hookgate.utils.logging.iso_formatter import format_timestamp


def utc_now_iso() -> str:
    """Current time as UTC ISO 8601 with milliseconds (same format as the logs)."""
    return format_timestamp(time.time())


def query_multimap(pairs: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Group ordered query pairs by name, keeping every value in order."""
    grouped: dict[str, list[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name, []).append(value)
    return grouped


class HistoryEntry(BaseModel):
    """Immutable record of one forwarding attempt.

    Attributes:
        time: When the attempt concluded (UTC ISO 8601).
        key: Route key the caller used.
        method: HTTP method forwarded.
        tail: Tail path appended to the destination ("" when none).
        query: Incoming query parameters, values in original order.
        status: Status relayed to the caller (502 on transport failure).
        duration_ms: Wall time from sending the request to the end of the
            relayed body.
        request_bytes: Body bytes sent downstream.
        response_bytes: Body bytes relayed to the caller.
        client_ip: Caller address, if known.
        error: Failure detail, None on success.
    """

    model_config = ConfigDict(frozen=True)

    time: str = Field(default_factory=utc_now_iso)
    key: str
    method: str
    tail: str = ""
    query: dict[str, list[str]] = Field(default_factory=dict)
    status: int
    duration_ms: int = Field(default=0, ge=0)
    request_bytes: int = Field(default=0, ge=0)
    response_bytes: int = Field(default=0, ge=0)
    client_ip: str | None = None
    error: str | None = None
