"""Agent registry models.

An agent is a named unit of automation (caller, messenger, scorer, ...)
that depends on a set of external providers. Its status is written by
operators and, for the degraded/idle pair only, by the health monitor.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class AgentStatus(str, Enum):
    """Operational status of an agent."""

    IDLE = "idle"
    ACTIVE = "active"
    DEGRADED = "degraded"  # A required provider is unhealthy
    DISABLED = "disabled"  # Operator decision
    ERROR = "error"  # Manually flagged failure


# Statuses the health monitor must never overwrite
PROTECTED_STATUSES = frozenset({AgentStatus.DISABLED, AgentStatus.ERROR})


class Agent(BaseModel):
    """A configurable automation unit owned by an organization."""

    id: UUID = Field(default_factory=uuid4)
    organization_id: UUID = Field(..., description="Owning organization")
    agent_key: str = Field(..., min_length=1, description="Stable key, unique per organization")
    display_name: str | None = Field(default=None)

    required_providers: list[str] = Field(
        default_factory=list,
        description="Providers this agent cannot function without",
    )
    is_enabled: bool = Field(default=True, description="Operator kill-switch")
    status: AgentStatus = Field(default=AgentStatus.IDLE)

    last_error_message: str | None = Field(default=None)
    last_error_at: datetime | None = Field(default=None)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_dispatchable(self) -> bool:
        """Whether the operator allows this agent to run."""
        return self.is_enabled and self.status != AgentStatus.DISABLED

    def unhealthy_providers(self, healthy: dict[str, bool]) -> list[str]:
        """Required providers that are not known to be healthy.

        A provider with no result counts as unhealthy.
        """
        return [p for p in self.required_providers if not healthy.get(p, False)]


def health_transition(current: AgentStatus, all_healthy: bool) -> AgentStatus | None:
    """Compute the health-driven status change for an agent.

    Only degraded <-> idle is ever produced. Returns None when the
    status must stay as it is.
    """
    if current in PROTECTED_STATUSES:
        return None

    if not all_healthy and current != AgentStatus.DEGRADED:
        return AgentStatus.DEGRADED

    if all_healthy and current == AgentStatus.DEGRADED:
        return AgentStatus.IDLE

    return None
