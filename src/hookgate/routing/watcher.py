"""Background watcher for external edits to the routes file.

Another process (or an operator with an editor) may rewrite routes.json
while the gateway runs. The watcher polls the file's checksum and triggers
a reload when it differs from the content the table last wrote or loaded,
so the gateway's own writes never cause a reload.
"""

from __future__ import annotations

__all__ = ["RouteFileWatcher"]

import asyncio
import logging
import traceback

from hookgate.constants import DEFAULT_WATCH_INTERVAL_SECONDS
from hookgate.routing.reloader import RouteReloader
from hookgate.routing.route_table import RouteTable
from hookgate.telemetry.system_logger import get_system_logger
from hookgate.utils.file_helpers import compute_file_checksum


class RouteFileWatcher:
    """Polls the routes file and reloads the table when it changes.

    A missing or unreadable file is ignored (the current table stays
    active). A content version that failed to reload is not retried until
    the file changes again.
    """

    def __init__(
        self,
        table: RouteTable,
        reloader: RouteReloader,
        check_interval: float = DEFAULT_WATCH_INTERVAL_SECONDS,
        system_logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            table: Route table whose file is watched.
            reloader: Reloader invoked on change.
            check_interval: Seconds between polls.
            system_logger: Logger for crash reports.
        """
        self._table = table
        self._reloader = reloader
        self.check_interval = check_interval
        self._logger = system_logger or get_system_logger()

        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._crashed = False
        self._rejected_checksum: str | None = None

    @property
    def is_running(self) -> bool:
        """True while the poll loop is active and hasn't crashed."""
        return self._running and not self._crashed and self._task is not None

    async def start(self) -> None:
        """Start the background poll task."""
        if self._running:
            return

        self._running = True
        self._crashed = False
        self._task = asyncio.create_task(self._watch_loop(), name="route_file_watcher")

    async def stop(self) -> None:
        """Stop the poll task and wait for it to finish."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def check_once(self) -> bool:
        """Compare the file against the table and reload if it changed.

        Returns:
            True if a reload happened and succeeded.
        """
        checksum = await asyncio.to_thread(self._read_checksum)
        if checksum is None or checksum == self._table.checksum:
            return False
        if checksum == self._rejected_checksum:
            return False

        result = await self._reloader.reload(source="file_watch")
        if result.status != "success":
            self._rejected_checksum = checksum
            return False

        self._rejected_checksum = None
        return True

    def _read_checksum(self) -> str | None:
        try:
            return compute_file_checksum(self._table.path)
        except OSError:
            return None

    async def _watch_loop(self) -> None:
        try:
            while self._running:
                await asyncio.sleep(self.check_interval)
                if not self._running:
                    break
                await self.check_once()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._crashed = True
            self._logger.error(
                {
                    "event": "route_watcher_crashed",
                    "message": f"Route file watcher stopped: {e}",
                    "error": str(e),
                    "traceback": traceback.format_exc(),
                }
            )
        finally:
            self._running = False
