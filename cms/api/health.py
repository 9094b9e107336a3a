"""Health check endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cms import __version__
from cms.api.deps import get_config_service
from cms.services.config_service import ConfigService

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    service: Annotated[ConfigService, Depends(get_config_service)],
) -> HealthResponse:
    """Health check endpoint for monitoring and load balancers."""
    db_status = "ok" if await service.store.ping() else "error"
    return HealthResponse(
        status="ok" if db_status == "ok" else "degraded",
        version=__version__,
        database=db_status,
    )
