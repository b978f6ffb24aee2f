"""Audit event model.

Every decision taken by the dispatcher or the health monitor is written
as one immutable AuditEvent. Downstream dashboards and notification
delivery read these events; `details` stays structured for them.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class AuditStatus(str, Enum):
    """Outcome recorded on an audit event."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


class AuditEvent(BaseModel):
    """Immutable record of one decision."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    organization_id: UUID | None = Field(
        default=None,
        description="Owning organization; None for platform-level events",
    )
    actor_key: str = Field(..., description="Component that emitted the event")
    action: str = Field(..., description="Decision taken (task_dispatched, agent_status_changed, ...)")
    status: AuditStatus = Field(..., description="Outcome of the decision")
    message: str = Field(default="", description="Human-readable summary")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Structured, machine-parseable context",
    )
    subject_id: UUID | None = Field(default=None, description="Related lead")
    task_id: UUID | None = Field(default=None, description="Related task")
    execution_ms: int = Field(default=0, ge=0, description="Time spent on the decision")
    cost: float = Field(default=0.0, ge=0, description="Provider cost attributed to the decision")
    created_at: datetime = Field(default_factory=utc_now, description="Event time")
