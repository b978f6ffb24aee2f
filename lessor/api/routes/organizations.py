"""Per-organization provider health and activity endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query

from lessor.api.dependencies import AuditStoreDep, HealthMonitorDep, HealthStoreDep
from lessor.api.exceptions import ProviderNotFoundError
from lessor.api.models.requests import ActivityResponse
from lessor.health.models import HealthReport, ProviderHealthResult
from lessor.health.probes.base import ProbeError
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/organizations/{organization_id}")


@router.post("/health-checks", response_model=HealthReport)
async def run_health_check(
    organization_id: UUID,
    monitor: HealthMonitorDep,
) -> HealthReport:
    """Probe every provider and update agent statuses for the organization."""
    logger.info("health_check_requested", organization_id=str(organization_id))
    return await monitor.check_all(organization_id)


@router.post("/providers/{provider}/test", response_model=ProviderHealthResult)
async def test_provider(
    organization_id: UUID,
    provider: str,
    monitor: HealthMonitorDep,
) -> ProviderHealthResult:
    """Probe one provider. Agent statuses are left untouched."""
    try:
        return await monitor.check_one(organization_id, provider)
    except ProbeError as e:
        raise ProviderNotFoundError(f"No probe registered for provider '{provider}'") from e


@router.get("/providers", response_model=list[ProviderHealthResult])
async def list_provider_health(
    organization_id: UUID,
    health_store: HealthStoreDep,
) -> list[ProviderHealthResult]:
    """Latest health snapshot per provider."""
    return await health_store.list_results(organization_id)


@router.get("/activity", response_model=ActivityResponse)
async def list_activity(
    organization_id: UUID,
    audit_store: AuditStoreDep,
    actor_key: str | None = None,
    action: str | None = None,
    task_id: UUID | None = None,
    since: datetime | None = Query(default=None, description="Only events at or after this time"),
    limit: int = Query(default=50, ge=1, le=500),
) -> ActivityResponse:
    """Tail the audit trail, most recent first.

    Clients poll with `since` set to the newest timestamp they have seen.
    """
    events = await audit_store.list_events(
        organization_id,
        actor_key=actor_key,
        action=action,
        task_id=task_id,
        since=since,
        limit=limit,
    )
    return ActivityResponse(events=events, count=len(events))
