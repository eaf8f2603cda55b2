"""
Health check endpoints.

Provides liveness and readiness probes. Readiness checks that the
collection file can be written.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from cardledger.services.card_sync import CardSyncService, get_card_sync_service

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    storage: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    service: Annotated[CardSyncService, Depends(get_card_sync_service)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the collection file cannot be written.
    """
    if service.store.is_writable():
        return HealthResponse(status="ready", storage="writable")

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="not ready", storage="read-only")
