"""Gateway control API endpoints.

Provides:
- GET /status - Uptime, route table and reload status
- POST /reload-routes - Reload the route table from disk
"""

__all__ = ["router"]

from fastapi import APIRouter, Request

from hookgate import __version__
from hookgate.api.deps import EngineDep, HistoryDep, RouteReloaderDep, RouteTableDep
from hookgate.api.schemas import GatewayStatus, ReloadResponse

router = APIRouter()


@router.get("/status")
async def get_status(
    request: Request,
    table: RouteTableDep,
    reloader: RouteReloaderDep,
    history: HistoryDep,
    engine: EngineDep,
) -> GatewayStatus:
    """Get current gateway status."""
    watcher = getattr(request.app.state, "route_watcher", None)
    return GatewayStatus(
        running=True,
        version=__version__,
        uptime_seconds=reloader.uptime_seconds,
        routes_count=len(table),
        routes_path=str(table.path),
        last_reload_at=reloader.last_reload_at,
        reload_count=reloader.reload_count,
        last_reload_error=reloader.last_error,
        watcher_running=watcher.is_running if watcher is not None else False,
        allowlist=sorted(engine.allowlist.hosts),
        history_capacity=history.capacity,
    )


@router.post("/reload-routes")
async def reload_routes(reloader: RouteReloaderDep) -> ReloadResponse:
    """Reload routes from disk.

    On failure the current routes stay active and the error is returned.
    """
    result = await reloader.reload(source="api")
    return ReloadResponse(
        status=result.status,
        old_count=result.old_count,
        new_count=result.new_count,
        error=result.error,
    )
