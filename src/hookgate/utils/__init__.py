"""Shared utilities for hookgate (file helpers, logging setup)."""
