"""Agenda task models and lifecycle state machine.

Tasks are scheduled follow-up actions against a lead, created by
upstream producers and consumed to a terminal state by the dispatcher.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"  # Waiting to be dispatched
    IN_PROGRESS = "in_progress"  # Claimed by a dispatcher
    COMPLETED = "completed"  # Handler succeeded
    FAILED = "failed"  # Terminal failure, never retried
    PAUSED_HUMAN_CONTROL = "paused_human_control"  # Lead taken over by a person
    CANCELLED = "cancelled"  # Discarded by an operator or producer


TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset(
        {
            TaskStatus.IN_PROGRESS,
            TaskStatus.FAILED,
            TaskStatus.PAUSED_HUMAN_CONTROL,
            TaskStatus.CANCELLED,
        }
    ),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED}),
    TaskStatus.PAUSED_HUMAN_CONTROL: frozenset({TaskStatus.PENDING, TaskStatus.CANCELLED}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in TASK_TRANSITIONS.items() if not targets
)


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """Check whether the lifecycle allows moving from current to target."""
    return target in TASK_TRANSITIONS[current]


class ActionKind(str, Enum):
    """Closed set of action kinds handlers can be registered for."""

    CALL = "call"
    SMS = "sms"
    EMAIL = "email"
    NOTIFY = "notify"
    SCORE = "score"
    VERIFY = "verify"


class Task(BaseModel):
    """A scheduled unit of work against a lead, owned by one agent."""

    id: UUID = Field(default_factory=uuid4)
    organization_id: UUID = Field(..., description="Owning organization")
    subject_id: UUID = Field(..., description="Lead the task acts on")
    agent_key: str = Field(..., description="Agent that owns the task")
    # Kept as a string so an unknown kind fails the task, not the load
    action_kind: str = Field(..., description="Handler discriminator")

    scheduled_for: datetime = Field(..., description="Eligible once now >= this")
    status: TaskStatus = Field(default=TaskStatus.PENDING)

    pause_reason: str | None = Field(default=None)
    paused_at: datetime | None = Field(default=None)
    executed_at: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)
    last_error: str | None = Field(default=None)

    payload: dict[str, Any] = Field(
        default_factory=dict, description="Opaque context passed to the handler"
    )
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_due(self, now: datetime) -> bool:
        return self.status == TaskStatus.PENDING and self.scheduled_for <= now


class TaskOutcome(str, Enum):
    """What one dispatcher run did with a task."""

    DISPATCHED = "dispatched"
    SKIPPED = "skipped"
    FAILED = "failed"
    HUMAN_CONTROLLED = "human_controlled"


class TaskResult(BaseModel):
    """Per-task record inside a batch result."""

    task_id: UUID
    outcome: TaskOutcome
    reason: str | None = None
    execution_ms: int = 0


class BatchResult(BaseModel):
    """Counts and per-task outcomes of one dispatcher run."""

    dispatched: int = 0
    skipped: int = 0
    failed: int = 0
    human_controlled: int = 0
    results: list[TaskResult] = Field(default_factory=list)
    execution_ms: int = 0

    @property
    def processed(self) -> int:
        return len(self.results)

    def record(self, result: TaskResult) -> None:
        """Append a task result and bump its counter."""
        self.results.append(result)
        if result.outcome == TaskOutcome.DISPATCHED:
            self.dispatched += 1
        elif result.outcome == TaskOutcome.SKIPPED:
            self.skipped += 1
        elif result.outcome == TaskOutcome.FAILED:
            self.failed += 1
        elif result.outcome == TaskOutcome.HUMAN_CONTROLLED:
            self.human_controlled += 1
