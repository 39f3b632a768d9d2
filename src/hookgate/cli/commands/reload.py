"""Reload command for hookgate CLI."""

from __future__ import annotations

__all__ = ["reload"]

import sys

import click

from hookgate.cli.api_client import api_request

from ..styling import style_error, style_success


@click.command()
def reload() -> None:
    """Reload routes from disk (requires running gateway).

    Same as sending SIGHUP to the gateway process. An invalid or missing
    routes file is reported and the current routes stay active.
    """
    data = api_request("POST", "/control/reload-routes")

    if data.get("status") == "success":
        click.echo(style_success(f"Routes reloaded: {data.get('old_count', 0)} -> {data.get('new_count', 0)}"))
        return

    click.echo(style_error(f"Reload failed ({data.get('status')}): {data.get('error')}"), err=True)
    click.echo("Current routes are unchanged.", err=True)
    sys.exit(1)
