"""Operational telemetry (system logger)."""
