"""In-process request and document-operation metrics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


@dataclass
class RouteStats:
    count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0


class MetricsRegistry:
    """Thread-safe counters exposed at ``/api/metrics``."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.reset()

    def reset(self) -> None:
        """Reset all counters (useful for tests)."""

        with self._lock:
            self._requests_total = 0
            self._status_families: Counter[str] = Counter()
            self._routes: Dict[str, RouteStats] = {}
            self._operations: Dict[str, Counter[str]] = {}

    def request_finished(
        self, method: str, path: str, status_code: int, duration_seconds: float
    ) -> None:
        duration_ms = max(duration_seconds * 1000.0, 0.0)
        with self._lock:
            self._requests_total += 1
            self._status_families[f"{status_code // 100}xx"] += 1
            stats = self._routes.setdefault(f"{method.upper()} {path}", RouteStats())
            stats.count += 1
            stats.total_duration_ms += duration_ms
            stats.max_duration_ms = max(stats.max_duration_ms, duration_ms)

    def document_operation(self, collection: str, operation: str) -> None:
        """Count a completed upload, overwrite, delete or reconcile run."""

        with self._lock:
            self._operations.setdefault(collection, Counter())[operation] += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            routes = {
                key: {
                    "count": stats.count,
                    "avg_duration_ms": stats.total_duration_ms / (stats.count or 1),
                    "max_duration_ms": stats.max_duration_ms,
                }
                for key, stats in self._routes.items()
            }
            return {
                "requests_total": self._requests_total,
                "status_codes": dict(self._status_families),
                "routes": routes,
                "collections": {
                    name: dict(counts) for name, counts in self._operations.items()
                },
            }


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Record status family and latency for every request."""

    def __init__(self, app: ASGIApp, *, registry: MetricsRegistry | None = None) -> None:
        super().__init__(app)
        self._registry = registry or metrics_registry

    async def dispatch(self, request: Request, call_next):
        start = perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            self._registry.request_finished(
                request.method, request.url.path, status_code, perf_counter() - start
            )


metrics_registry = MetricsRegistry()

__all__ = ["MetricsRegistry", "RequestMetricsMiddleware", "metrics_registry"]
