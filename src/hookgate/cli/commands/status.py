"""Status command for hookgate CLI.

Shows gateway runtime status. Requires running gateway (uses API).
"""

from __future__ import annotations

__all__ = ["status"]

import json
from typing import Any

import click

from hookgate.cli.api_client import api_request

from ..styling import style_dim, style_error, style_label

# Time conversion constants
SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


def _format_uptime(seconds: float) -> str:
    if seconds >= SECONDS_PER_DAY:
        return f"{seconds / SECONDS_PER_DAY:.1f} days"
    if seconds >= SECONDS_PER_HOUR:
        return f"{seconds / SECONDS_PER_HOUR:.1f} hours"
    if seconds >= SECONDS_PER_MINUTE:
        return f"{seconds / SECONDS_PER_MINUTE:.1f} minutes"
    return f"{seconds:.0f} seconds"


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status(as_json: bool) -> None:
    """Show gateway runtime status."""
    data = api_request("GET", "/control/status")

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    _print_status_formatted(data)


def _print_status_formatted(data: dict[str, Any]) -> None:
    """Print status in human-readable format."""
    click.echo(click.style("Gateway: Running", fg="green", bold=True))
    click.echo(f"  {style_label('Version')} {data.get('version')}")
    click.echo(f"  {style_label('Uptime')} {_format_uptime(data.get('uptime_seconds', 0))}")
    click.echo()

    click.echo(f"  {style_label('Routes')} {data.get('routes_count', 0)}")
    click.echo(f"  {style_label('Routes file')} {data.get('routes_path')}")
    click.echo(f"  {style_label('Reloads')} {data.get('reload_count', 0)}")
    if data.get("last_reload_at"):
        click.echo(f"  {style_label('Last reload')} {data['last_reload_at']}")
    if data.get("last_reload_error"):
        click.echo(f"  {style_label('Last reload error')} {style_error(data['last_reload_error'])}")
    watcher = "running" if data.get("watcher_running") else "off"
    click.echo(f"  {style_label('File watcher')} {watcher}")
    click.echo()

    allowlist = data.get("allowlist") or []
    click.echo(f"  {style_label('Allowlist')} {', '.join(allowlist) if allowlist else style_dim('(any host)')}")
    click.echo(f"  {style_label('History per key')} {data.get('history_capacity')}")
