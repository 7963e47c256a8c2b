"""Prometheus metrics for CourseHub.

Provides metrics collection and exposure:
- HTTP request metrics (latency, count)
- Cache metrics (hits, misses, failures)
- Entity store failures

Usage:
    from coursehub.observability.metrics import record_cache_hit

    record_cache_hit("course")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from prometheus_client import REGISTRY, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from coursehub.core.ids import is_valid_identity

if TYPE_CHECKING:
    from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    http_requests_total: Any = None
    http_request_duration_seconds: Any = None

    cache_hits_total: Any = None
    cache_misses_total: Any = None
    cache_failures_total: Any = None

    store_failures_total: Any = None

    enabled: bool = True
    _initialized: bool = field(default=False, repr=False)

    def initialize(self, enabled: bool = True) -> None:
        """Create the Prometheus collectors once per process."""
        if self._initialized:
            return

        self.enabled = enabled
        self._initialized = True
        if not enabled:
            logger.info("Metrics are disabled")
            return

        self.http_requests_total = Counter(
            "coursehub_http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
        )
        self.http_request_duration_seconds = Histogram(
            "coursehub_http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "path"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
        )
        self.cache_hits_total = Counter(
            "coursehub_cache_hits_total",
            "Read-through cache hits",
            ["entity"],
        )
        self.cache_misses_total = Counter(
            "coursehub_cache_misses_total",
            "Read-through cache misses",
            ["entity"],
        )
        self.cache_failures_total = Counter(
            "coursehub_cache_failures_total",
            "Cache operations that failed and were degraded",
            ["operation"],
        )
        self.store_failures_total = Counter(
            "coursehub_store_failures_total",
            "Entity store operations that failed",
            ["operation", "collection"],
        )
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if not self.enabled:
            return b"# Metrics disabled\n"
        return generate_latest(REGISTRY)


metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry, initializing it on first access."""
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware recording request count and duration by method, path and status."""

    def __init__(self, app: "ASGIApp") -> None:
        super().__init__(app)
        self.metrics = get_metrics()

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        if request.url.path.startswith("/health") or request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time
            if self.metrics.http_requests_total:
                self.metrics.http_requests_total.labels(
                    method=method, path=path, status=status_code
                ).inc()
            if self.metrics.http_request_duration_seconds:
                self.metrics.http_request_duration_seconds.labels(
                    method=method, path=path
                ).observe(duration)


def normalize_path(path: str) -> str:
    """Replace identity segments with a placeholder to bound label cardinality.

    Examples:
        /api/students/65f0c0ffee0000000000abcd/courses -> /api/students/{id}/courses
    """
    parts = path.strip("/").split("/")
    normalized = ["{id}" if is_valid_identity(part) else part for part in parts]
    return "/" + "/".join(normalized)


def record_cache_hit(entity: str) -> None:
    metrics = get_metrics()
    if metrics.cache_hits_total:
        metrics.cache_hits_total.labels(entity=entity).inc()


def record_cache_miss(entity: str) -> None:
    metrics = get_metrics()
    if metrics.cache_misses_total:
        metrics.cache_misses_total.labels(entity=entity).inc()


def record_cache_failure(operation: str) -> None:
    metrics = get_metrics()
    if metrics.cache_failures_total:
        metrics.cache_failures_total.labels(operation=operation).inc()


def record_store_failure(operation: str, collection: str) -> None:
    metrics = get_metrics()
    if metrics.store_failures_total:
        metrics.store_failures_total.labels(operation=operation, collection=collection).inc()
