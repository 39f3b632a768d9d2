"""Shared fixtures for hookgate tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from hookgate.config import AppConfig, ForwardingConfig, LoggingConfig, StorageConfig


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Directory holding the routes file and history log."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def routes_path(data_dir: Path) -> Path:
    return data_dir / "routes.json"


@pytest.fixture
def config(tmp_path: Path, data_dir: Path) -> AppConfig:
    """Config writing everything under tmp_path, with the file watcher off."""
    return AppConfig(
        forwarding=ForwardingConfig(allowlist=[]),
        storage=StorageConfig(data_dir=str(data_dir), watch_interval_seconds=0),
        logging=LoggingConfig(log_dir=str(tmp_path / "logs")),
    )


@pytest.fixture(autouse=True)
def isolated_config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOOKGATE_CONFIG at tmp_path and clear other HOOKGATE_* overrides."""
    for name in list(os.environ):
        if name.startswith("HOOKGATE_"):
            monkeypatch.delenv(name)
    path = tmp_path / "config" / "config.json"
    monkeypatch.setenv("HOOKGATE_CONFIG", str(path))
    return path


@pytest.fixture
def downstream_response() -> Callable[..., httpx.Response]:
    """Factory for MockTransport responses that behave like network responses.

    httpx.Response(content=...) is read eagerly, which a streaming relay
    can't iterate raw; a ByteStream body is left unread.
    """

    def factory(
        status_code: int = 200,
        body: bytes = b"",
        headers: list[tuple[str, str]] | dict[str, str] | None = None,
    ) -> httpx.Response:
        return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(body))

    return factory
