"""Main CLI entry point for hookgate.

Defines the CLI group and registers all subcommands.

Commands:
    config   - Configuration display (show, path)
    history  - Forwarding history on a running gateway (show, clear)
    init     - Write a configuration file
    reload   - Reload routes from disk on a running gateway
    routes   - Route management on a running gateway (list, set, delete)
    start    - Start the gateway
    status   - Show gateway runtime status

Subcommand help:
    hookgate COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from hookgate import __version__

from .commands.config import config
from .commands.history import history
from .commands.init import init
from .commands.reload import reload
from .commands.routes import routes
from .commands.start import start
from .commands.status import status


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  hookgate init --allowlist hooks.example.com
  hookgate start
  hookgate routes set orders https://hooks.example.com/orders
  curl -X POST http://127.0.0.1:3030/forward/orders -d '{"a":1}'
  hookgate history show orders

Environment overrides:
  HOOKGATE_PORT, HOOKGATE_ADMIN_TOKEN, HOOKGATE_ALLOWLIST,
  HOOKGATE_HISTORY_MAX, HOOKGATE_DATA_DIR, HOOKGATE_TIMEOUT, HOOKGATE_CONFIG
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """hookgate: keyed HTTP forwarding gateway for webhooks."""
    if version:
        click.echo(f"hookgate {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(config)
cli.add_command(history)
cli.add_command(init)
cli.add_command(reload)
cli.add_command(routes)
cli.add_command(start)
cli.add_command(status)


def main() -> None:
    """CLI entry point."""
    cli()
