"""Gateway control API schemas."""

from __future__ import annotations

__all__ = [
    "GatewayStatus",
    "HealthResponse",
    "ReloadResponse",
]

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness probe."""

    ok: bool = True


class GatewayStatus(BaseModel):
    """Gateway and route table status."""

    running: bool
    version: str
    uptime_seconds: float
    routes_count: int
    routes_path: str
    last_reload_at: str | None
    reload_count: int
    last_reload_error: str | None
    watcher_running: bool
    allowlist: list[str]
    history_capacity: int


class ReloadResponse(BaseModel):
    """Route reload response."""

    status: str  # "success", "validation_error", "file_error"
    old_count: int
    new_count: int
    error: str | None = None
