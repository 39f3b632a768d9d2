"""Shared dependencies for API routes.

All route files import dependencies from here rather than reaching into
app.state themselves.

Usage with Annotated:
    from hookgate.api.deps import RouteTableDep

    @router.get("")
    async def list_routes(table: RouteTableDep) -> RouteListResponse:
        ...
"""

from __future__ import annotations

__all__ = [
    # Dependency functions
    "get_allowlist",
    "get_config",
    "get_engine",
    "get_history",
    "get_route_reloader",
    "get_route_table",
    # Type aliases for Annotated pattern
    "AllowlistDep",
    "ConfigDep",
    "EngineDep",
    "HistoryDep",
    "RouteReloaderDep",
    "RouteTableDep",
]

from typing import TYPE_CHECKING, Annotated, Any, Callable

from fastapi import Depends, HTTPException, Request

if TYPE_CHECKING:
    from hookgate.config import AppConfig
    from hookgate.forwarding import Allowlist, ForwardingEngine
    from hookgate.history import HistoryLedger
    from hookgate.routing import RouteReloader, RouteTable


def _create_state_getter(attr_name: str, type_hint: str) -> Callable[[Request], Any]:
    """Create a dependency function that retrieves a value from app.state.

    Args:
        attr_name: Attribute name on app.state (e.g., "route_table").
        type_hint: Type name used in the error message and docstring.

    Returns:
        A dependency function compatible with FastAPI's Depends().
        Raises HTTPException 503 when the attribute is missing.
    """

    def getter(request: Request) -> Any:
        value = getattr(request.app.state, attr_name, None)
        if value is None:
            raise HTTPException(status_code=503, detail=f"{type_hint} not available. Gateway may still be starting.")
        return value

    getter.__name__ = f"get_{attr_name}"
    getter.__doc__ = f"Get {type_hint} from app.state.\n\nRaises HTTPException 503 if not available."
    return getter


# =============================================================================
# Dependency Functions (generated via factory)
# =============================================================================

get_config: Callable[[Request], "AppConfig"] = _create_state_getter("config", "Config")
get_route_table: Callable[[Request], "RouteTable"] = _create_state_getter("route_table", "Route table")
get_route_reloader: Callable[[Request], "RouteReloader"] = _create_state_getter("route_reloader", "Route reloader")
get_history: Callable[[Request], "HistoryLedger"] = _create_state_getter("history", "History ledger")
get_engine: Callable[[Request], "ForwardingEngine"] = _create_state_getter("engine", "Forwarding engine")
get_allowlist: Callable[[Request], "Allowlist"] = _create_state_getter("allowlist", "Allowlist")


# =============================================================================
# Type Aliases for Annotated Pattern
# =============================================================================

ConfigDep = Annotated["AppConfig", Depends(get_config)]
RouteTableDep = Annotated["RouteTable", Depends(get_route_table)]
RouteReloaderDep = Annotated["RouteReloader", Depends(get_route_reloader)]
HistoryDep = Annotated["HistoryLedger", Depends(get_history)]
EngineDep = Annotated["ForwardingEngine", Depends(get_engine)]
AllowlistDep = Annotated["Allowlist", Depends(get_allowlist)]
