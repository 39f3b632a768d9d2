"""Command-line interface for hookgate.

Provides commands for initializing configuration, starting the gateway,
and managing routes and history on a running gateway.
"""

from .main import cli, main

__all__ = ["cli", "main"]
