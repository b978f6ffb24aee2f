"""Human takeover and release of leads."""

from uuid import UUID

from fastapi import APIRouter

from lessor.agenda.errors import SubjectNotFoundError
from lessor.api.dependencies import HumanControlDep
from lessor.api.exceptions import LeadNotFoundError
from lessor.api.models.requests import (
    ReleaseRequest,
    ReleaseResponse,
    TakeoverRequest,
    TakeoverResponse,
)

router = APIRouter(prefix="/leads")


@router.post("/{lead_id}/takeover", response_model=TakeoverResponse)
async def take_over_lead(
    lead_id: UUID,
    request: TakeoverRequest,
    human_control: HumanControlDep,
) -> TakeoverResponse:
    """Hand the lead to a person and pause its pending tasks."""
    try:
        paused = await human_control.take_over(lead_id, request.user_id, request.reason)
    except SubjectNotFoundError as e:
        raise LeadNotFoundError(f"Lead {lead_id} not found") from e
    return TakeoverResponse(lead_id=lead_id, paused_tasks=paused)


@router.post("/{lead_id}/release", response_model=ReleaseResponse)
async def release_lead(
    lead_id: UUID,
    request: ReleaseRequest,
    human_control: HumanControlDep,
) -> ReleaseResponse:
    """Return the lead to automation, resuming or cancelling paused tasks."""
    try:
        affected = await human_control.release(lead_id, request.resume, request.user_id)
    except SubjectNotFoundError as e:
        raise LeadNotFoundError(f"Lead {lead_id} not found") from e
    return ReleaseResponse(lead_id=lead_id, resumed=request.resume, affected_tasks=affected)
