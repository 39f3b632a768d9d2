"""Logging utilities.

This package provides logging infrastructure for hookgate:
- iso_formatter: ISO 8601 timestamp formatting for JSONL logs
- best_effort_handler: File handler whose write failures never propagate
- logger_setup: Factory for the durable history logger

Import directly from submodules to avoid circular imports:
    from hookgate.utils.logging.logger_setup import setup_best_effort_logger
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
