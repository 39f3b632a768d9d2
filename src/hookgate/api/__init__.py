"""HTTP surface: forwarding endpoint and admin API (FastAPI)."""

from hookgate.api.server import create_app

__all__ = ["create_app"]
