"""Health check API router."""

from __future__ import annotations

import os

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..config import Settings, get_settings


class HealthResponse(BaseModel):
    """Schema describing the health check payload."""

    ok: bool
    storage_writable: bool


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse, summary="Service health status")
def read_health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Report liveness and whether the storage root accepts writes."""

    root = settings.storage_root
    writable = root.is_dir() and os.access(root, os.W_OK)
    return HealthResponse(ok=True, storage_writable=writable)


__all__ = ["router", "HealthResponse", "read_health"]
