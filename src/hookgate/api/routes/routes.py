"""Route management API endpoints.

Provides:
- GET /routes - List all routes
- PUT /routes/{key} - Create or overwrite a route ({"url": "..."})
- DELETE /routes/{key} - Remove a route

Every mutation is written to the routes file before the response is sent.
"""

__all__ = ["router"]

from fastapi import APIRouter

from hookgate.api.deps import AllowlistDep, RouteTableDep
from hookgate.api.errors import APIError, ErrorCode
from hookgate.api.schemas import (
    RouteDeletedResponse,
    RouteListResponse,
    RouteSavedResponse,
    RouteUpsertRequest,
)
from hookgate.exceptions import RoutePersistenceError
from hookgate.forwarding.allowlist import host_of

router = APIRouter()


def _is_absolute_http_url(url: str) -> bool:
    return url.lower().startswith(("http://", "https://")) and host_of(url) is not None


@router.get("")
async def list_routes(table: RouteTableDep) -> RouteListResponse:
    """List all routes."""
    routes = table.list_routes()
    return RouteListResponse(routes=routes, count=len(routes))


@router.put("/{key}")
async def upsert_route(
    key: str,
    body: RouteUpsertRequest,
    table: RouteTableDep,
    allowlist: AllowlistDep,
) -> RouteSavedResponse:
    """Create or overwrite the route for key.

    Raises:
        APIError: 400 ROUTE_INVALID if url is missing, blank or not an
            absolute http(s) URL; 400 ROUTE_NOT_ALLOWED if the host is not
            allowlisted; 500 ROUTE_SAVE_FAILED if the routes file could not
            be written (the route is not changed).
    """
    url = (body.url or "").strip()
    if not url:
        raise APIError(status_code=400, code=ErrorCode.ROUTE_INVALID, message="url is required")

    if not _is_absolute_http_url(url):
        raise APIError(
            status_code=400,
            code=ErrorCode.ROUTE_INVALID,
            message="url must be an absolute http(s) URL",
            details={"url": url},
        )

    if not allowlist.is_allowed(url):
        raise APIError(
            status_code=400,
            code=ErrorCode.ROUTE_NOT_ALLOWED,
            message="destination host not allowlisted",
            details={"host": host_of(url)},
        )

    try:
        await table.upsert(key, url)
    except ValueError as e:
        raise APIError(status_code=400, code=ErrorCode.ROUTE_INVALID, message=str(e)) from e
    except RoutePersistenceError as e:
        raise APIError(status_code=500, code=ErrorCode.ROUTE_SAVE_FAILED, message=str(e)) from e

    return RouteSavedResponse(key=key, url=url)


@router.delete("/{key}")
async def delete_route(key: str, table: RouteTableDep) -> RouteDeletedResponse:
    """Delete the route for key.

    Raises:
        APIError: 404 ROUTE_NOT_FOUND if absent; 500 ROUTE_SAVE_FAILED if
            the routes file could not be written.
    """
    try:
        deleted = await table.delete(key)
    except RoutePersistenceError as e:
        raise APIError(status_code=500, code=ErrorCode.ROUTE_SAVE_FAILED, message=str(e)) from e

    if not deleted:
        raise APIError(
            status_code=404,
            code=ErrorCode.ROUTE_NOT_FOUND,
            message=f"Route '{key}' not found",
            details={"key": key},
        )
    return RouteDeletedResponse(key=key)
