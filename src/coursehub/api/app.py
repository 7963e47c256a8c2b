"""FastAPI application factory for CourseHub.

Creates the application with:
- Course and student routers under /api
- Lifecycle management for the MongoDB and Redis connections
- Prometheus metrics and correlation-aware logging
- Result/Message error handling
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from coursehub.api.errors import (
    coursehub_exception_handler,
    generic_exception_handler,
    request_validation_exception_handler,
)
from coursehub.api.middleware import CorrelationMiddleware
from coursehub.api.routers import courses, health, students
from coursehub.api.routers import metrics as metrics_router
from coursehub.config import Settings, get_settings
from coursehub.context import AppContext
from coursehub.core.errors import CourseHubError
from coursehub.observability import LogContext, configure_logging
from coursehub.observability.metrics import MetricsMiddleware, get_metrics
from coursehub.persistence.connections import ConnectionManager

logger = logging.getLogger(__name__)


def build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle.

        On startup:
        - Configure structured logging
        - Initialize Prometheus metrics
        - Connect MongoDB, then Redis, each with bounded retry

        On shutdown:
        - Close both connections; close failures are logged only

        A dependency that stays unreachable raises DependencyUnavailable,
        which aborts startup before any request is served.
        """
        configure_logging(
            json_format=settings.env != "dev",
            level=settings.log_level,
        )
        get_metrics().initialize(enabled=settings.enable_metrics)

        logger.info(f"Starting CourseHub ({settings.env})")
        connections = ConnectionManager(settings)
        with LogContext(request_id="startup"):
            await connections.connect_all()
        app.state.context = AppContext.from_connections(connections, ttl=settings.cache_ttl)
        logger.info("CourseHub startup complete")

        try:
            yield
        finally:
            logger.info("Shutting down CourseHub")
            await connections.close_all()
            app.state.context = None
            logger.info("CourseHub shutdown complete")

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are read from the environment unless given explicitly.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="CourseHub",
        description="Course and student management API",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=build_lifespan(settings),
    )
    app.state.settings = settings

    # CorrelationMiddleware is innermost so the context is set for all logging
    app.add_middleware(CorrelationMiddleware)
    if settings.enable_metrics:
        app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(CourseHubError, cast(ExceptionHandler, coursehub_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    if settings.enable_metrics:
        app.include_router(metrics_router.router)
    app.include_router(courses.router)
    app.include_router(students.router)

    return app
