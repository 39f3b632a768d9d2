"""Config command group for hookgate CLI.

Reads the config file directly; no running gateway is needed.
"""

from __future__ import annotations

__all__ = ["config"]

import json
import sys

import click

from hookgate.config import get_config_path, load_config
from hookgate.exceptions import ConfigurationError

from ..styling import style_dim, style_error, style_header


@click.group()
def config() -> None:
    """Configuration display commands."""
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Display the effective configuration.

    Shows the config file merged with HOOKGATE_* environment overrides.
    The admin token is masked.
    """
    config_file_path = get_config_path()

    try:
        loaded_config = load_config(config_file_path)
    except ConfigurationError as e:
        click.echo("\n" + style_error(f"Error: {e}"), err=True)
        sys.exit(e.exit_code)

    token_display = "(set)" if loaded_config.admin.token else "(none)"

    if as_json:
        config_dict = loaded_config.model_dump(mode="json")
        config_dict["admin"]["token"] = token_display
        config_dict["_computed"] = {
            "config_file": str(config_file_path),
            "config_file_exists": config_file_path.exists(),
            "routes_path": str(loaded_config.routes_path),
            "history_path": str(loaded_config.history_path),
            "system_log_path": str(loaded_config.system_log_path),
        }
        click.echo(json.dumps(config_dict, indent=2))
        return

    click.echo("\nhookgate configuration:\n")

    click.echo(style_header("Server"))
    click.echo(f"  host: {loaded_config.server.host}")
    click.echo(f"  port: {loaded_config.server.port}")
    click.echo(f"  admin token: {token_display}")
    click.echo()

    click.echo(style_header("Forwarding"))
    allowlist = ", ".join(loaded_config.forwarding.allowlist) or style_dim("(any host)")
    click.echo(f"  allowlist: {allowlist}")
    timeout = loaded_config.forwarding.timeout_seconds
    click.echo(f"  timeout: {f'{timeout}s' if timeout is not None else 'none'}")
    click.echo(f"  max body: {loaded_config.forwarding.max_body_bytes} bytes")
    click.echo()

    click.echo(style_header("Storage"))
    click.echo(f"  routes: {loaded_config.routes_path}")
    click.echo(f"  history: {loaded_config.history_path}")
    click.echo(f"  history per key: {loaded_config.history.max_per_key}")
    click.echo(f"  watch interval: {loaded_config.storage.watch_interval_seconds}s")
    click.echo()

    click.echo(style_header("Logging"))
    click.echo(f"  system log: {loaded_config.system_log_path}")
    click.echo(f"  log_level: {loaded_config.logging.log_level}")
    click.echo()

    if config_file_path.exists():
        click.echo(f"Config file: {config_file_path}")
    else:
        click.echo(f"Config file: {config_file_path} " + style_dim("(not created, using defaults)"))


@config.command("path")
def config_path_cmd() -> None:
    """Show config file path.

    HOOKGATE_CONFIG overrides the OS-appropriate default location.
    """
    path = get_config_path()
    click.echo(str(path))

    if not path.exists():
        click.echo("(file does not exist - run 'hookgate init' to create)", err=True)
