"""History command group for hookgate CLI.

Shows and clears the per-key forwarding history of a running gateway.
"""

from __future__ import annotations

__all__ = ["history"]

import json
from typing import Any
from urllib.parse import quote

import click

from hookgate.cli.api_client import api_request
from hookgate.constants import DEFAULT_HISTORY_LIMIT

from ..styling import style_dim, style_error, style_status, style_success


def _history_endpoint(key: str) -> str:
    return f"/history/{quote(key, safe='')}"


def _format_entry(entry: dict[str, Any]) -> str:
    """One line per entry: time, method, status, duration, sizes, path."""
    path = "/" + entry["tail"] if entry.get("tail") else "/"
    query = entry.get("query") or {}
    if query:
        path += "?" + "&".join(f"{name}={value}" for name, values in query.items() for value in values)
    line = (
        f"{entry['time']}  {entry['method']:7} {style_status(entry['status'])} "
        f"{entry['duration_ms']:>6}ms  {entry['request_bytes']}B/{entry['response_bytes']}B  {path}"
    )
    if entry.get("error"):
        line += "  " + style_error(entry["error"])
    return line


@click.group()
def history() -> None:
    """Forwarding history commands (requires running gateway)."""
    pass


@history.command("show")
@click.argument("key")
@click.option(
    "--limit",
    "-n",
    type=click.IntRange(min=1),
    default=DEFAULT_HISTORY_LIMIT,
    show_default=True,
    help="Maximum entries to show (newest first)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def history_show(key: str, limit: int, as_json: bool) -> None:
    """Show recent forwards for KEY, newest first."""
    data = api_request("GET", _history_endpoint(key), params={"limit": limit})

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    entries: list[dict[str, Any]] = data.get("entries", [])
    if not entries:
        click.echo(style_dim(f"No history for '{key}'."))
        return

    for entry in entries:
        click.echo(_format_entry(entry))


@history.command("clear")
@click.argument("key")
def history_clear(key: str) -> None:
    """Clear the in-memory history for KEY (the log file is kept)."""
    data = api_request("DELETE", _history_endpoint(key))
    click.echo(style_success(f"Cleared {data.get('removed', 0)} entries for '{key}'"))
