"""API route modules.

Route organization:
- forward: Forwarding surface (/forward/{key}/{tail})
- routes: Route management (list, upsert, delete)
- history: Recent forwarding history (read, clear)
- control: Gateway status and route reload
- health: Liveness probe
"""

from . import control, forward, health, history, routes

__all__ = [
    "control",
    "forward",
    "health",
    "history",
    "routes",
]
