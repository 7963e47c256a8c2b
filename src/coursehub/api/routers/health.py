"""Health check endpoints for CourseHub.

Provides Kubernetes-compatible liveness and readiness probes:
- /health/live  - Liveness probe (always returns OK if process is running)
- /health/ready - Readiness probe (checks MongoDB and Redis connectivity)
- /health       - Full report with per-dependency status
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from coursehub.core.errors import DependencyKind
from coursehub.persistence.connections import ConnectionManager

router = APIRouter(tags=["health"])

CHECK_TIMEOUT = 5.0  # seconds


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single dependency."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def check_dependency(
    connections: ConnectionManager | None, kind: DependencyKind
) -> ComponentHealth:
    """Ping one dependency with a timeout."""
    start = time.monotonic()

    def finish(healthy: bool, message: str | None = None) -> ComponentHealth:
        return ComponentHealth(
            name=kind.value,
            status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
            latency_ms=(time.monotonic() - start) * 1000,
            message=message,
        )

    if connections is None:
        return finish(False, "Not connected")
    try:
        healthy = await asyncio.wait_for(connections.ping(kind), timeout=CHECK_TIMEOUT)
    except asyncio.TimeoutError:
        return finish(False, f"{kind.value} check timed out")
    except Exception as e:
        return finish(False, str(e))
    return finish(healthy, None if healthy else "Not connected")


async def check_all(request: Request) -> list[ComponentHealth]:
    context = getattr(request.app.state, "context", None)
    connections = context.connections if context is not None else None
    return list(
        await asyncio.gather(*(check_dependency(connections, kind) for kind in DependencyKind))
    )


@router.get("/health")
async def full_health(request: Request) -> JSONResponse:
    """Full health report for external checks.

    Returns 200 when all dependencies are healthy, 503 otherwise.
    """
    components = await check_all(request)

    checks: dict[str, dict[str, Any]] = {}
    for component in components:
        checks[component.name] = {
            "status": "up" if component.healthy else "down",
            "latency_ms": round(component.latency_ms, 2),
        }
        if component.message:
            checks[component.name]["message"] = component.message

    healthy = all(component.healthy for component in components)
    overall = HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY
    return JSONResponse(
        content={"status": overall.value, "checks": checks},
        status_code=200 if healthy else 503,
    )


@router.get("/health/live")
async def live() -> dict[str, str]:
    """Liveness probe.

    Returns OK if the process is running.
    """
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(request: Request) -> JSONResponse:
    """Readiness probe.

    Returns 200 if MongoDB and Redis both answer a ping, 503 otherwise.
    """
    components = await check_all(request)
    healthy = all(component.healthy for component in components)
    overall = HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY
    return JSONResponse(
        content={
            "status": overall.value,
            "components": [component.to_dict() for component in components],
        },
        status_code=200 if healthy else 503,
    )
