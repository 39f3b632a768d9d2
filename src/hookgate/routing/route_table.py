"""Route table backed by a pretty-printed JSON file.

The file is a JSON object mapping route keys to destination URLs:

    {
      "orders": "https://a.example/hook"
    }

Concurrency model:
- Readers (the forwarding engine) never lock. They read whatever dict the
  table currently references.
- Mutations copy the dict, persist the copy atomically, and only then swap
  the reference. A failed write leaves the old dict in place.
- Reload replaces the whole dict in one swap; it never merges.
"""

from __future__ import annotations

__all__ = [
    "RouteTable",
    "load_routes",
    "read_routes_file",
    "save_routes",
]

import asyncio
import json
import logging
from pathlib import Path

from pydantic import RootModel, ValidationError

from hookgate.exceptions import RoutePersistenceError
from hookgate.telemetry.system_logger import get_system_logger
from hookgate.utils.file_helpers import atomic_write_text, compute_checksum


class RouteFile(RootModel[dict[str, str]]):
    """Schema of the routes file."""


def read_routes_file(path: Path) -> tuple[dict[str, str], str]:
    """Read and validate the routes file.

    Args:
        path: Routes JSON file.

    Returns:
        Tuple of (routes, checksum of the file content).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not a JSON object of strings.
    """
    with open(path, "rb") as f:
        content = f.read()

    try:
        routes = RouteFile.model_validate_json(content).root
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '(root)'}: {error['msg']}"
            for error in e.errors()
        )
        raise ValueError(f"Invalid routes file {path}: {problems}") from e

    return dict(routes), compute_checksum(content)


def load_routes(path: Path) -> tuple[dict[str, str], str | None]:
    """Load routes for startup. A missing file is an empty table.

    Returns:
        Tuple of (routes, checksum or None when the file doesn't exist).

    Raises:
        ValueError: If the file exists but is invalid.
    """
    try:
        return read_routes_file(path)
    except FileNotFoundError:
        return {}, None


def save_routes(path: Path, routes: dict[str, str]) -> str:
    """Rewrite the routes file atomically.

    Returns:
        Checksum of the written content.

    Raises:
        OSError: If the file cannot be written.
    """
    content = json.dumps(routes, indent=2) + "\n"
    return atomic_write_text(path, content, prefix=".routes_")


class RouteTable:
    """Mapping of route key to destination URL.

    Every upsert/delete persists the full table before returning, so a
    success cannot be lost by a crash right afterwards.
    """

    def __init__(
        self,
        path: Path,
        routes: dict[str, str] | None = None,
        *,
        checksum: str | None = None,
        system_logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the table.

        Args:
            path: Routes JSON file used for persistence.
            routes: Initial mapping (not persisted until the first mutation).
            checksum: Checksum of the file the initial mapping came from.
            system_logger: Logger for route events. Defaults to the system logger.
        """
        self._path = path
        self._routes: dict[str, str] = dict(routes or {})
        self._checksum = checksum
        self._logger = system_logger or get_system_logger()
        self._lock = asyncio.Lock()

    @classmethod
    def from_file(cls, path: Path, system_logger: logging.Logger | None = None) -> "RouteTable":
        """Create a table from the routes file (empty if the file is missing).

        Raises:
            ValueError: If the file exists but is invalid.
        """
        routes, checksum = load_routes(path)
        return cls(path, routes, checksum=checksum, system_logger=system_logger)

    @property
    def path(self) -> Path:
        """Routes file backing this table."""
        return self._path

    @property
    def checksum(self) -> str | None:
        """Checksum of the file content last written or loaded by this table."""
        return self._checksum

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, key: object) -> bool:
        return key in self._routes

    def get(self, key: str) -> str | None:
        """Return the destination for key, or None if absent."""
        return self._routes.get(key)

    def list_routes(self) -> dict[str, str]:
        """Return a snapshot copy of all routes."""
        return dict(self._routes)

    async def upsert(self, key: str, destination: str) -> None:
        """Create or overwrite a route, then persist the full table.

        Args:
            key: Route key.
            destination: Absolute destination URL.

        Raises:
            ValueError: If key or destination is blank.
            RoutePersistenceError: If the table could not be written.
        """
        destination = destination.strip()
        if not key or not key.strip():
            raise ValueError("Route key must not be blank")
        if not destination:
            raise ValueError("Route destination must not be blank")

        async with self._lock:
            updated = {**self._routes, key: destination}
            await self._persist(updated)
            self._routes = updated

        self._logger.info(
            {
                "event": "route_saved",
                "message": f"Route '{key}' -> {destination}",
                "key": key,
                "destination": destination,
            }
        )

    async def delete(self, key: str) -> bool:
        """Remove a route, then persist the full table.

        Returns:
            True if the route existed and was removed, False if it was absent.

        Raises:
            RoutePersistenceError: If the table could not be written.
        """
        async with self._lock:
            if key not in self._routes:
                return False
            updated = {k: v for k, v in self._routes.items() if k != key}
            await self._persist(updated)
            self._routes = updated

        self._logger.info({"event": "route_deleted", "message": f"Route '{key}' deleted", "key": key})
        return True

    async def reload_from_file(self) -> tuple[int, int]:
        """Replace the whole table with the file's content (used by reload).

        The read and the swap happen under the mutation lock, so a
        concurrent upsert/delete is either fully before the read or fully
        after the swap. Nothing is written.

        Returns:
            (old_count, new_count).

        Raises:
            FileNotFoundError: If the routes file does not exist.
            ValueError: If the file is not a valid routes object.
            OSError: If the file could not be read.
        """
        async with self._lock:
            routes, checksum = await asyncio.to_thread(read_routes_file, self._path)
            old_count = len(self._routes)
            self._routes = routes
            self._checksum = checksum
        return old_count, len(routes)

    async def _persist(self, routes: dict[str, str]) -> None:
        try:
            self._checksum = await asyncio.to_thread(save_routes, self._path, routes)
        except OSError as e:
            self._logger.error(
                {
                    "event": "route_persist_failed",
                    "message": f"Could not write routes file {self._path}: {e}",
                    "path": str(self._path),
                    "error": str(e),
                }
            )
            raise RoutePersistenceError(f"Could not write routes file {self._path}: {e}") from e
