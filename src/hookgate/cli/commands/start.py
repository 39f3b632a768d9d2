"""Start command for hookgate CLI.

Loads the effective configuration and serves the gateway in the foreground.
"""

from __future__ import annotations

__all__ = ["start"]

import sys
from pathlib import Path
from typing import NoReturn

import click

from hookgate.config import load_config
from hookgate.exceptions import ConfigurationError
from hookgate.gateway import run_gateway
from hookgate.telemetry.system_logger import get_system_logger

from ..styling import style_error


def _startup_failed(event: str, error: Exception, message: str, exit_code: int = 1) -> NoReturn:
    """Log a startup failure, print it, and exit."""
    get_system_logger().error(
        {
            "event": event,
            "message": str(error),
            "error_type": type(error).__name__,
            "exit_code": exit_code,
        }
    )
    click.echo("\n" + style_error(message), err=True)
    sys.exit(exit_code)


@click.command()
@click.option("--host", help="Override the configured bind host")
@click.option("--port", type=click.IntRange(1, 65535), help="Override the configured port")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: HOOKGATE_CONFIG or the app directory)",
)
def start(host: str | None, port: int | None, config_path: Path | None) -> None:
    """Start the gateway (runs until interrupted).

    Reads the config file (defaults when there is none) and applies
    HOOKGATE_* environment overrides, then --host/--port.

    Send SIGHUP to reload the routes file without restarting.
    """
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        _startup_failed("config_invalid", e, f"Invalid configuration: {e}", exit_code=e.exit_code)

    if host is not None or port is not None:
        server = config.server.model_copy(
            update={key: value for key, value in (("host", host), ("port", port)) if value is not None}
        )
        config = config.model_copy(update={"server": server})

    try:
        run_gateway(config)
    except ConfigurationError as e:
        _startup_failed("routes_invalid", e, f"Cannot start: {e}", exit_code=e.exit_code)
    except OSError as e:
        _startup_failed("startup_failed", e, f"Cannot start gateway: {e}")
    except KeyboardInterrupt:
        pass
