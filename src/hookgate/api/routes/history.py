"""History API endpoints.

Provides:
- GET /history/{key}?limit=N - Recent entries for key, newest first
- DELETE /history/{key} - Clear the in-memory view for key (durable log untouched)
"""

__all__ = ["router"]

from typing import Annotated

from fastapi import APIRouter, Query

from hookgate.api.deps import HistoryDep
from hookgate.api.schemas import HistoryClearedResponse, HistoryResponse
from hookgate.constants import DEFAULT_HISTORY_LIMIT

router = APIRouter()


@router.get("/{key}")
async def get_history(
    key: str,
    history: HistoryDep,
    limit: Annotated[int, Query(ge=1)] = DEFAULT_HISTORY_LIMIT,
) -> HistoryResponse:
    """Get recent history for key.

    At most min(limit, per-key capacity) entries are returned.
    """
    entries = history.query(key, limit)
    return HistoryResponse(key=key, count=len(entries), entries=entries)


@router.delete("/{key}")
async def clear_history(key: str, history: HistoryDep) -> HistoryClearedResponse:
    """Clear the in-memory history for key."""
    removed = history.clear(key)
    return HistoryClearedResponse(key=key, removed=removed)
