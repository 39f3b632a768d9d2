"""Liveness probe (unauthenticated)."""

__all__ = ["router"]

from fastapi import APIRouter

from hookgate.api.schemas import HealthResponse

router = APIRouter()


@router.get("/healthz")
async def healthz() -> HealthResponse:
    return HealthResponse()
