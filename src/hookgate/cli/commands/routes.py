"""Routes command group for hookgate CLI.

Manages the route table of a running gateway through the admin API, so
changes are persisted and take effect immediately.
"""

from __future__ import annotations

__all__ = ["routes"]

import json
from urllib.parse import quote

import click

from hookgate.cli.api_client import api_request

from ..styling import style_dim, style_label, style_success


def _route_endpoint(key: str) -> str:
    return f"/routes/{quote(key, safe='')}"


@click.group()
def routes() -> None:
    """Route management commands (requires running gateway)."""
    pass


@routes.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def routes_list(as_json: bool) -> None:
    """List all routes."""
    data = api_request("GET", "/routes")

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    table: dict[str, str] = data.get("routes", {})
    if not table:
        click.echo(style_dim("No routes configured."))
        return

    width = max(len(key) for key in table)
    for key in sorted(table):
        click.echo(f"  {key:{width}}  {table[key]}")
    click.echo()
    click.echo(style_label("Routes") + f" {len(table)}")


@routes.command("set")
@click.argument("key")
@click.argument("url")
def routes_set(key: str, url: str) -> None:
    """Create or replace the route for KEY.

    \b
    Example:
      hookgate routes set orders https://hooks.example.com/orders
    """
    data = api_request("PUT", _route_endpoint(key), json_data={"url": url})
    click.echo(style_success(f"Route '{data.get('key', key)}' -> {data.get('url', url)}"))


@routes.command("delete")
@click.argument("key")
def routes_delete(key: str) -> None:
    """Delete the route for KEY."""
    api_request("DELETE", _route_endpoint(key))
    click.echo(style_success(f"Route '{key}' deleted"))
