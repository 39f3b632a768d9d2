"""FastAPI application for the forwarding surface and admin API.

Mounted routes:
- /forward/{key}[/{tail}] - Forwarding surface (never authenticated)
- /routes - Route management (admin)
- /history - Forwarding history (admin)
- /control - Status and route reload (admin)
- /healthz - Liveness probe (never authenticated)

Admin routes require the configured admin token, if any (see api.security).

Usage:
    The gateway runs this app under uvicorn (see gateway.py). For local
    development:
        uvicorn hookgate.api.server:create_app --factory --port 3030
"""

from __future__ import annotations

__all__ = ["create_app"]

import asyncio
import signal
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hookgate import __version__
from hookgate.config import AppConfig, load_config
from hookgate.constants import FORWARD_PATH_PREFIX
from hookgate.exceptions import ConfigurationError, ForwardingError
from hookgate.forwarding import Allowlist, ForwardingEngine, create_forwarding_client
from hookgate.history import HistoryLedger
from hookgate.routing import RouteFileWatcher, RouteReloader, RouteTable
from hookgate.telemetry.system_logger import get_system_logger

from .errors import (
    APIError,
    api_error_handler,
    forwarding_error_handler,
    http_exception_handler,
    validation_error_handler,
)
from .routes import control, forward, health, history, routes
from .security import require_admin


def _make_sighup_handler(reloader: RouteReloader, tasks: set[asyncio.Task[Any]]) -> Callable[[], None]:
    """Build the SIGHUP callback.

    Each reload runs as a task held in tasks until it finishes, so it is not
    garbage-collected mid-run and its failure (if any) is logged.
    """
    logger = get_system_logger()

    def on_done(task: asyncio.Task[Any]) -> None:
        tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                {
                    "event": "sighup_reload_crashed",
                    "message": f"Route reload after SIGHUP crashed: {exc}",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                }
            )

    def handle_sighup() -> None:
        task = asyncio.create_task(reloader.reload(source="sighup"))
        tasks.add(task)
        task.add_done_callback(on_done)

    return handle_sighup


def _install_sighup_handler(reloader: RouteReloader, tasks: set[asyncio.Task[Any]]) -> bool:
    """Reload routes on SIGHUP (Unix, main thread only).

    Returns:
        True if the handler was installed.
    """
    logger = get_system_logger()
    handle_sighup = _make_sighup_handler(reloader, tasks)

    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGHUP, handle_sighup)
    except (ValueError, OSError, AttributeError, NotImplementedError, RuntimeError):
        logger.warning({"event": "sighup_handler_not_available", "reason": "platform_unsupported"})
        return False
    return True


def _remove_sighup_handler() -> None:
    try:
        asyncio.get_running_loop().remove_signal_handler(signal.SIGHUP)
    except (ValueError, OSError, AttributeError, NotImplementedError, RuntimeError):
        pass


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the route watcher (and SIGHUP reload); release resources on shutdown."""
    watcher: RouteFileWatcher | None = app.state.route_watcher
    sighup_installed = False

    if watcher is not None:
        await watcher.start()
    if app.state.install_signal_handlers:
        sighup_installed = _install_sighup_handler(app.state.route_reloader, app.state.reload_tasks)

    try:
        yield
    finally:
        if sighup_installed:
            _remove_sighup_handler()
        if app.state.reload_tasks:
            await asyncio.gather(*app.state.reload_tasks, return_exceptions=True)
        if watcher is not None:
            await watcher.stop()
        if app.state.owns_http_client:
            await app.state.http_client.aclose()
        app.state.history.close()


def create_app(
    config: AppConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    http_client: httpx.AsyncClient | None = None,
    install_signal_handlers: bool = False,
) -> FastAPI:
    """Create the FastAPI application with all routes and gateway state.

    Args:
        config: Effective configuration. Loaded via load_config() if None.
        transport: Transport for the forwarding client (tests pass
            httpx.MockTransport). Ignored when http_client is given.
        http_client: Pre-built forwarding client. The app does not close it.
        install_signal_handlers: Reload routes on SIGHUP while running.

    Returns:
        Configured FastAPI application.

    Raises:
        ConfigurationError: If the routes file exists but is invalid.
    """
    config = config or load_config()

    try:
        table = RouteTable.from_file(config.routes_path)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    allowlist = Allowlist(config.forwarding.allowlist)
    ledger = HistoryLedger(config.history_path, config.history.max_per_key)
    reloader = RouteReloader(table)

    owns_http_client = http_client is None
    client = http_client or create_forwarding_client(config.forwarding.timeout_seconds, transport=transport)

    watcher = None
    if config.storage.watch_interval_seconds > 0:
        watcher = RouteFileWatcher(table, reloader, check_interval=config.storage.watch_interval_seconds)

    app = FastAPI(
        title="hookgate",
        description="Keyed HTTP forwarding gateway",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.route_table = table
    app.state.route_reloader = reloader
    app.state.route_watcher = watcher
    app.state.allowlist = allowlist
    app.state.history = ledger
    app.state.http_client = client
    app.state.owns_http_client = owns_http_client
    app.state.install_signal_handlers = install_signal_handlers
    app.state.reload_tasks = set()
    app.state.engine = ForwardingEngine(table, allowlist, ledger, client)

    # Register exception handlers for structured error responses
    app.add_exception_handler(ForwardingError, forwarding_error_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    admin = [Depends(require_admin)]
    app.include_router(forward.router, prefix=FORWARD_PATH_PREFIX, tags=["forward"])
    app.include_router(routes.router, prefix="/routes", tags=["routes"], dependencies=admin)
    app.include_router(history.router, prefix="/history", tags=["history"], dependencies=admin)
    app.include_router(control.router, prefix="/control", tags=["control"], dependencies=admin)
    app.include_router(health.router, tags=["health"])

    return app
