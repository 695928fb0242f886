"""Routes that expose operational observability data."""

from __future__ import annotations

from fastapi import APIRouter

from .. import __version__
from ..observability import metrics_registry

router = APIRouter(prefix="/api", tags=["observability"])


@router.get("/metrics")
def read_metrics() -> dict[str, object]:
    """Return request and per-collection operation counters."""

    snapshot = metrics_registry.snapshot()
    snapshot["version"] = __version__
    return snapshot


__all__ = ["router"]
