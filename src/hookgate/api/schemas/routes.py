"""Route management API schemas."""

from __future__ import annotations

__all__ = [
    "RouteDeletedResponse",
    "RouteListResponse",
    "RouteSavedResponse",
    "RouteUpsertRequest",
]

from pydantic import BaseModel


class RouteUpsertRequest(BaseModel):
    """Body of PUT /routes/{key}.

    url is optional at the schema level so a missing url is reported as
    ROUTE_INVALID (400) rather than a generic validation error.
    """

    url: str | None = None


class RouteListResponse(BaseModel):
    """All routes."""

    routes: dict[str, str]
    count: int


class RouteSavedResponse(BaseModel):
    """Route upsert result."""

    saved: bool = True
    key: str
    url: str


class RouteDeletedResponse(BaseModel):
    """Route delete result."""

    deleted: bool = True
    key: str
