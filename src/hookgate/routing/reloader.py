"""Route table hot reload support.

Provides RouteReloader for replacing the in-memory route table with the
current content of the routes file, without restarting the gateway.

Triggers:
- SIGHUP signal (Unix)
- API endpoint POST /control/reload-routes
- CLI command: hookgate reload
- RouteFileWatcher, when the file changes outside the gateway
"""

from __future__ import annotations

__all__ = [
    "RouteReloadResult",
    "RouteReloader",
]

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from hookgate.routing.route_table import RouteTable
from hookgate.telemetry.system_logger import get_system_logger


@dataclass(frozen=True, slots=True)
class RouteReloadResult:
    """Result of a route reload attempt.

    Attributes:
        status: "success", "validation_error", or "file_error".
        old_count: Number of routes before reload.
        new_count: Number of routes after reload (unchanged on failure).
        error: Error message if status is not "success".
    """

    status: Literal["success", "validation_error", "file_error"]
    old_count: int = 0
    new_count: int = 0
    error: str | None = None


class RouteReloader:
    """Reloads the route table from disk and tracks reload state.

    On any failure the current table stays active (last known good).
    A mutex prevents concurrent reloads from racing each other.
    """

    def __init__(self, table: RouteTable, system_logger: logging.Logger | None = None) -> None:
        self._table = table
        self._logger = system_logger or get_system_logger()

        # State for status endpoint
        self._started_at = datetime.now(timezone.utc)
        self._last_reload_at: datetime | None = None
        self._reload_count = 0
        self._last_error: str | None = None

        self._reload_lock = asyncio.Lock()

    @property
    def last_reload_at(self) -> str | None:
        """ISO 8601 timestamp of the last successful reload, or None."""
        return self._last_reload_at.isoformat() if self._last_reload_at else None

    @property
    def uptime_seconds(self) -> float:
        """Seconds since the reloader was created (gateway startup)."""
        return (datetime.now(timezone.utc) - self._started_at).total_seconds()

    @property
    def reload_count(self) -> int:
        """Number of successful reloads since startup."""
        return self._reload_count

    @property
    def last_error(self) -> str | None:
        """Error of the most recent reload, cleared by the next success."""
        return self._last_error

    async def reload(self, *, source: str = "manual") -> RouteReloadResult:
        """Reload the route table from its file.

        Args:
            source: What triggered the reload ("manual", "sighup", "file_watch").

        Returns:
            RouteReloadResult with status and route counts.
        """
        async with self._reload_lock:
            old_count = len(self._table)
            path = self._table.path

            try:
                old_count, new_count = await self._table.reload_from_file()
            except FileNotFoundError:
                return self._failed("file_error", f"Routes file not found: {path}", old_count, source)
            except ValueError as e:
                return self._failed("validation_error", str(e), old_count, source)
            except OSError as e:
                return self._failed("file_error", f"Could not read routes file {path}: {e}", old_count, source)

            self._last_reload_at = datetime.now(timezone.utc)
            self._reload_count += 1
            self._last_error = None

            self._logger.info(
                {
                    "event": "routes_reloaded",
                    "message": f"Routes reloaded ({old_count} -> {new_count})",
                    "source": source,
                    "old_count": old_count,
                    "new_count": new_count,
                }
            )
            return RouteReloadResult(status="success", old_count=old_count, new_count=new_count)

    def _failed(
        self,
        status: Literal["validation_error", "file_error"],
        error: str,
        old_count: int,
        source: str,
    ) -> RouteReloadResult:
        self._last_error = error
        self._logger.error(
            {
                "event": "routes_reload_failed",
                "message": f"Route reload failed, keeping current routes: {error}",
                "error_type": status,
                "error": error,
                "source": source,
                "routes_path": str(self._table.path),
            }
        )
        return RouteReloadResult(status=status, old_count=old_count, new_count=old_count, error=error)
