"""Observability module for CourseHub.

Provides metrics and structured logging:
- Prometheus metrics for requests, cache and entity store
- JSON structured logging with correlation IDs
"""

from coursehub.observability.logging import (
    LogContext,
    configure_logging,
    correlation_id_var,
    request_id_var,
)
from coursehub.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    metrics_registry,
)

__all__ = [
    # Logging
    "configure_logging",
    "LogContext",
    "request_id_var",
    "correlation_id_var",
    # Metrics
    "metrics_registry",
    "get_metrics",
    "MetricsMiddleware",
]
