"""Init command for hookgate CLI.

Writes the configuration file from command-line options. Anything not given
falls back to the built-in defaults.
"""

from __future__ import annotations

__all__ = ["init"]

import sys

import click

from hookgate.api.security import generate_token
from hookgate.config import (
    AdminConfig,
    AppConfig,
    ForwardingConfig,
    HistoryConfig,
    ServerConfig,
    StorageConfig,
    get_config_path,
)
from hookgate.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_FORWARD_TIMEOUT_SECONDS,
    DEFAULT_HISTORY_MAX,
    DEFAULT_HOST,
    DEFAULT_PORT,
)
from hookgate.utils.file_helpers import set_secure_permissions

from ..styling import style_dim, style_error, style_header, style_success


@click.command()
@click.option("--host", default=DEFAULT_HOST, show_default=True, help="Interface to bind")
@click.option("--port", type=click.IntRange(1, 65535), default=DEFAULT_PORT, show_default=True, help="Port to bind")
@click.option("--token", help="Admin API token (admin API is open when unset)")
@click.option("--generate-token", "generate_token_flag", is_flag=True, help="Generate a random admin token")
@click.option("--allowlist", default="", help="Comma-separated destination hosts (empty allows any)")
@click.option(
    "--history-max",
    type=click.IntRange(min=1),
    default=DEFAULT_HISTORY_MAX,
    show_default=True,
    help="History entries kept per key",
)
@click.option("--data-dir", default=DEFAULT_DATA_DIR, show_default=True, help="Routes file and history log directory")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_FORWARD_TIMEOUT_SECONDS,
    show_default=True,
    help="Downstream timeout in seconds",
)
@click.option("--no-timeout", is_flag=True, help="Disable the downstream timeout")
@click.option("--force", is_flag=True, help="Overwrite existing config without prompting")
def init(
    host: str,
    port: int,
    token: str | None,
    generate_token_flag: bool,
    allowlist: str,
    history_max: int,
    data_dir: str,
    timeout: float,
    no_timeout: bool,
    force: bool,
) -> None:
    """Initialize hookgate configuration.

    \b
    Examples:
      hookgate init --allowlist hooks.example.com,api.example.com
      hookgate init --port 8080 --generate-token --force
    """
    config_path = get_config_path()

    if config_path.exists() and not force:
        if not click.confirm(f"Config already exists at {config_path}. Overwrite?", default=False):
            click.echo("Aborted.")
            sys.exit(0)

    if token and generate_token_flag:
        click.echo(style_error("Use either --token or --generate-token, not both."), err=True)
        sys.exit(1)
    if generate_token_flag:
        token = generate_token()

    try:
        config = AppConfig(
            server=ServerConfig(host=host, port=port),
            admin=AdminConfig(token=token),
            forwarding=ForwardingConfig(
                allowlist=allowlist,
                timeout_seconds=None if no_timeout else timeout,
            ),
            history=HistoryConfig(max_per_key=history_max),
            storage=StorageConfig(data_dir=data_dir),
        )
    except ValueError as e:
        click.echo(style_error(f"Invalid configuration: {e}"), err=True)
        sys.exit(1)

    try:
        config.save_to_file(config_path)
        config.routes_path.parent.mkdir(parents=True, exist_ok=True)
        set_secure_permissions(config.routes_path.parent, is_directory=True)
    except OSError as e:
        click.echo(style_error(f"Failed to write configuration: {e}"), err=True)
        sys.exit(1)

    click.echo(style_success(f"Configuration saved to {config_path}"))
    click.echo()
    click.echo(style_header("Gateway"))
    click.echo(f"  listen: http://{host}:{port}")
    click.echo(f"  routes: {config.routes_path}")
    click.echo(f"  history: {config.history_path}")
    if config.forwarding.allowlist:
        click.echo(f"  allowlist: {', '.join(config.forwarding.allowlist)}")
    else:
        click.echo("  allowlist: " + style_dim("(any host)"))
    if generate_token_flag:
        click.echo()
        click.echo(f"Admin token: {token}")
        click.echo(style_dim("Stored in the config file; the CLI sends it automatically."))
    click.echo()
    click.echo("Start the gateway with: hookgate start")
