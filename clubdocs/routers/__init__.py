"""API router package."""

from fastapi import APIRouter

from .auth import router as auth_router
from .collections import routers as collection_routers
from .health import router as health_router
from .observability import router as observability_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(health_router)
api_router.include_router(observability_router)
for _collection_router in collection_routers:
    api_router.include_router(_collection_router)

__all__ = ["api_router"]
