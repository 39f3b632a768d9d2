"""Unit tests for route reload and the routes file watcher."""

import json
from pathlib import Path

import pytest

from hookgate.routing import RouteFileWatcher, RouteReloader, RouteTable, save_routes


@pytest.fixture
def table(routes_path: Path) -> RouteTable:
    save_routes(routes_path, {"a": "https://a.example/"})
    return RouteTable.from_file(routes_path)


@pytest.fixture
def reloader(table: RouteTable) -> RouteReloader:
    return RouteReloader(table)


# =============================================================================
# Tests: RouteReloader
# =============================================================================


class TestRouteReloader:
    """Tests for RouteReloader.reload."""

    @pytest.mark.asyncio
    async def test_reload_replaces_table(self, table: RouteTable, reloader: RouteReloader, routes_path: Path) -> None:
        """Given an edited file, reload swaps in its content (no merge)."""
        # Arrange
        routes_path.write_text(json.dumps({"b": "https://b.example/", "c": "https://c.example/"}))

        # Act
        result = await reloader.reload()

        # Assert
        assert result.status == "success"
        assert result.old_count == 1
        assert result.new_count == 2
        assert table.list_routes() == {"b": "https://b.example/", "c": "https://c.example/"}
        assert reloader.reload_count == 1
        assert reloader.last_reload_at is not None
        assert reloader.last_error is None

    @pytest.mark.asyncio
    async def test_invalid_file_keeps_current_routes(
        self, table: RouteTable, reloader: RouteReloader, routes_path: Path
    ) -> None:
        """Given a corrupt file, the last good table stays active."""
        routes_path.write_text("{broken")

        result = await reloader.reload()

        assert result.status == "validation_error"
        assert result.new_count == 1
        assert table.get("a") == "https://a.example/"
        assert reloader.reload_count == 0
        assert "Invalid routes file" in (reloader.last_error or "")

    @pytest.mark.asyncio
    async def test_missing_file_keeps_current_routes(
        self, table: RouteTable, reloader: RouteReloader, routes_path: Path
    ) -> None:
        routes_path.unlink()

        result = await reloader.reload()

        assert result.status == "file_error"
        assert "not found" in (result.error or "")
        assert table.get("a") == "https://a.example/"

    @pytest.mark.asyncio
    async def test_success_clears_last_error(
        self, table: RouteTable, reloader: RouteReloader, routes_path: Path
    ) -> None:
        routes_path.write_text("{broken")
        await reloader.reload()
        routes_path.write_text("{}")

        result = await reloader.reload()

        assert result.status == "success"
        assert reloader.last_error is None
        assert len(table) == 0


# =============================================================================
# Tests: RouteFileWatcher
# =============================================================================


class TestRouteFileWatcher:
    """Tests for RouteFileWatcher.check_once."""

    @pytest.mark.asyncio
    async def test_unchanged_file_does_nothing(self, table: RouteTable, reloader: RouteReloader) -> None:
        watcher = RouteFileWatcher(table, reloader)

        assert await watcher.check_once() is False
        assert reloader.reload_count == 0

    @pytest.mark.asyncio
    async def test_own_writes_do_not_trigger_reload(self, table: RouteTable, reloader: RouteReloader) -> None:
        """Given a mutation through the table, the watcher sees no change."""
        watcher = RouteFileWatcher(table, reloader)
        await table.upsert("b", "https://b.example/")

        assert await watcher.check_once() is False

    @pytest.mark.asyncio
    async def test_external_edit_triggers_reload(
        self, table: RouteTable, reloader: RouteReloader, routes_path: Path
    ) -> None:
        """Given a file edited by another process, the table is reloaded."""
        watcher = RouteFileWatcher(table, reloader)
        routes_path.write_text(json.dumps({"x": "https://x.example/"}))

        assert await watcher.check_once() is True
        assert table.list_routes() == {"x": "https://x.example/"}

    @pytest.mark.asyncio
    async def test_rejected_content_not_retried(
        self, table: RouteTable, reloader: RouteReloader, routes_path: Path
    ) -> None:
        """Given an invalid edit, it is reported once, not on every poll."""
        watcher = RouteFileWatcher(table, reloader)
        routes_path.write_text("{broken")

        assert await watcher.check_once() is False
        assert await watcher.check_once() is False

        assert reloader.last_error is not None
        assert table.get("a") == "https://a.example/"

    @pytest.mark.asyncio
    async def test_missing_file_ignored(self, table: RouteTable, reloader: RouteReloader, routes_path: Path) -> None:
        watcher = RouteFileWatcher(table, reloader)
        routes_path.unlink()

        assert await watcher.check_once() is False
        assert reloader.last_error is None

    @pytest.mark.asyncio
    async def test_start_and_stop(self, table: RouteTable, reloader: RouteReloader) -> None:
        watcher = RouteFileWatcher(table, reloader, check_interval=60)

        await watcher.start()
        assert watcher.is_running

        await watcher.stop()
        assert not watcher.is_running
