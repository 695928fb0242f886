"""Admin login endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings
from ..models import LoginRequest, LoginResponse
from ..services.auth import verify_credentials

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest, settings: Settings = Depends(get_settings)
) -> LoginResponse:
    """Check the admin credentials; failures are answered with 401."""

    verify_credentials(
        username=payload.username, password=payload.password, settings=settings
    )
    return LoginResponse()


__all__ = ["router", "login"]
