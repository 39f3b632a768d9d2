"""Gateway process runner.

Builds the FastAPI app from config and serves it with uvicorn. Route reload
on SIGHUP and the route file watcher are wired up in the app's lifespan.
"""

from __future__ import annotations

__all__ = ["run_gateway"]

import uvicorn

from hookgate import __version__
from hookgate.api.server import create_app
from hookgate.config import AppConfig
from hookgate.telemetry.system_logger import configure_system_logger_file, get_system_logger


def run_gateway(config: AppConfig) -> None:
    """Serve the gateway until interrupted (blocking).

    Args:
        config: Effective configuration.

    Raises:
        ConfigurationError: If the routes file is invalid.
        OSError: If the data or log directory cannot be created.
    """
    configure_system_logger_file(config.system_log_path, debug=config.logging.log_level == "DEBUG")
    logger = get_system_logger()

    app = create_app(config, install_signal_handlers=True)

    logger.info(
        {
            "event": "gateway_started",
            "message": f"hookgate v{__version__} listening on http://{config.server.host}:{config.server.port}",
            "host": config.server.host,
            "port": config.server.port,
            "routes_path": str(config.routes_path),
            "history_path": str(config.history_path),
            "routes_count": len(app.state.route_table),
            "allowlist": config.forwarding.allowlist,
            "admin_auth": config.admin.token is not None,
        }
    )

    server_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_config=None,
        access_log=False,  # the history ledger already records every forward
        ws="none",
        lifespan="on",
    )
    uvicorn.Server(server_config).run()

    logger.info({"event": "gateway_stopped", "message": "hookgate stopped"})
