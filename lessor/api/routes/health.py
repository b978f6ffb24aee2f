"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from lessor import __version__
from lessor.api.dependencies import (
    AgentStoreDep,
    AuditStoreDep,
    SettingsDep,
    TaskStoreDep,
    get_postgres_pool,
)
from lessor.api.models.requests import ComponentHealth, HealthResponse
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _check_store_health(store: object, name: str) -> ComponentHealth:
    """Report an in-process store as healthy once it is instantiated."""
    if store is None:
        return ComponentHealth(name=name, status="unhealthy", message="Store not initialized")
    return ComponentHealth(name=name, status="healthy", latency_ms=0.0)


async def _check_database_health() -> ComponentHealth:
    start = time.perf_counter()
    try:
        pool = await get_postgres_pool()
        healthy = await pool.health_check()
    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        return ComponentHealth(
            name="postgres",
            status="unhealthy",
            latency_ms=(time.perf_counter() - start) * 1000,
            message=str(e),
        )
    return ComponentHealth(
        name="postgres",
        status="healthy" if healthy else "unhealthy",
        latency_ms=(time.perf_counter() - start) * 1000,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: SettingsDep,
    task_store: TaskStoreDep,
    agent_store: AgentStoreDep,
    audit_store: AuditStoreDep,
) -> HealthResponse:
    """Check service health status.

    Returns the overall status along with each component. On the
    postgres backend the shared pool is pinged.
    """
    logger.debug("health_check_request")

    components = [
        _check_store_health(task_store, "task_store"),
        _check_store_health(agent_store, "agent_store"),
        _check_store_health(audit_store, "audit_store"),
    ]
    if settings.storage.backend == "postgres":
        components.append(await _check_database_health())

    unhealthy_count = sum(1 for c in components if c.status == "unhealthy")
    degraded_count = sum(1 for c in components if c.status == "degraded")

    overall_status: Literal["healthy", "degraded", "unhealthy"]
    if unhealthy_count > 0:
        overall_status = "unhealthy"
    elif degraded_count > 0:
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


@router.get("/metrics")
async def get_metrics() -> Response:
    """Get Prometheus metrics in text format for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
