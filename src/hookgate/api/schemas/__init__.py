"""API schemas (Pydantic models) for request/response validation.

Centralized schemas for all API routes.
"""

from __future__ import annotations

# Control schemas
from hookgate.api.schemas.control import GatewayStatus, HealthResponse, ReloadResponse

# History schemas
from hookgate.api.schemas.history import HistoryClearedResponse, HistoryResponse

# Route schemas
from hookgate.api.schemas.routes import (
    RouteDeletedResponse,
    RouteListResponse,
    RouteSavedResponse,
    RouteUpsertRequest,
)

__all__ = [
    # Control
    "GatewayStatus",
    "HealthResponse",
    "ReloadResponse",
    # History
    "HistoryClearedResponse",
    "HistoryResponse",
    # Routes
    "RouteDeletedResponse",
    "RouteListResponse",
    "RouteSavedResponse",
    "RouteUpsertRequest",
]
