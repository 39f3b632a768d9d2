"""CLI output styling utilities.

- Cyan bold for section headers and labels
- Green for success messages (with checkmark)
- Red for error messages (with cross)
- Dim for neutral/empty state messages
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_error",
    "style_header",
    "style_label",
    "style_status",
    "style_success",
]

import click


def style_header(title: str) -> str:
    """Style a section header: "--- Title ---" in cyan bold."""
    return click.style(f"--- {title} ---", fg="cyan", bold=True)


def style_label(label: str) -> str:
    """Style a label with a colon suffix.

    Example:
        >>> click.echo(style_label("Routes") + " 3")
        Routes: 3
    """
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_success(message: str) -> str:
    """Green message with a checkmark prefix."""
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Red message with a cross prefix."""
    return click.style(f"✗ {message}", fg="red")


def style_dim(message: str) -> str:
    """Dim message for empty states."""
    return click.style(message, dim=True)


def style_status(status: int) -> str:
    """Color an HTTP status: green 2xx, yellow 3xx, red 4xx/5xx."""
    if status < 300:
        color = "green"
    elif status < 400:
        color = "yellow"
    else:
        color = "red"
    return click.style(str(status), fg=color)
