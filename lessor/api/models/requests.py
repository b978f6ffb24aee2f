"""Request and response bodies for orchestration endpoints."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from lessor.audit.models import AuditEvent


class TakeoverRequest(BaseModel):
    """Body for POST /v1/leads/{lead_id}/takeover."""

    user_id: UUID = Field(..., description="Person taking over the lead")
    reason: str | None = Field(default=None, max_length=500)


class TakeoverResponse(BaseModel):
    lead_id: UUID
    paused_tasks: int


class ReleaseRequest(BaseModel):
    """Body for POST /v1/leads/{lead_id}/release."""

    resume: bool = Field(default=True, description="Resume paused tasks instead of cancelling them")
    user_id: UUID | None = None


class ReleaseResponse(BaseModel):
    lead_id: UUID
    resumed: bool
    affected_tasks: int


class CancelTaskRequest(BaseModel):
    """Body for POST /v1/tasks/{task_id}/cancel."""

    reason: str | None = Field(default=None, max_length=500)


class CancelTaskResponse(BaseModel):
    task_id: UUID
    cancelled: bool


class ActivityResponse(BaseModel):
    """Audit trail page, most recent first."""

    events: list[AuditEvent]
    count: int


class ComponentHealth(BaseModel):
    """Health of one service component."""

    name: str
    status: Literal["healthy", "degraded", "unhealthy"]
    latency_ms: float | None = None
    message: str | None = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    components: list[ComponentHealth]
    timestamp: datetime
