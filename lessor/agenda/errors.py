"""Dispatch error taxonomy.

Every error carries a stable `reason` code. The dispatcher turns these
into a terminal task transition plus an audit event; none of them abort
a batch.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lessor.compliance.models import ComplianceViolation


class DispatchError(Exception):
    """Base exception for per-task dispatch failures."""

    reason = "task_error"

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason
        self.details = details or {}


class SubjectNotFoundError(DispatchError):
    """The task's lead does not exist."""

    reason = "subject_not_found"


class AgentNotFoundError(DispatchError):
    """No agent with the task's key in the lead's organization."""

    reason = "agent_not_found"


class AgentDisabledError(DispatchError):
    """Agent switched off by an operator."""

    reason = "agent_disabled"


class AgentDegradedError(DispatchError):
    """Agent degraded by an unhealthy required provider."""

    reason = "agent_degraded"


class ComplianceBlockedError(DispatchError):
    """Compliance gate returned violations.

    The reason is the comma-joined violation codes.
    """

    def __init__(self, violations: list["ComplianceViolation"]) -> None:
        self.violations = list(violations)
        codes = [v.code for v in self.violations]
        super().__init__(
            f"Compliance check failed: {', '.join(v.detail for v in self.violations)}",
            reason=", ".join(codes) or "compliance_blocked",
            details={"violations": [v.model_dump() for v in self.violations]},
        )


class ComplianceCheckError(DispatchError):
    """The compliance gate itself failed or timed out."""

    reason = "compliance_error"


class HandlerError(DispatchError):
    """Action handler failed."""

    reason = "handler_failed"


class HandlerNotFoundError(HandlerError):
    """No handler registered for the agent/action pair, or unknown action kind."""

    reason = "handler_not_found"


class HandlerTimeoutError(HandlerError):
    """Action handler exceeded its timeout."""

    reason = "handler_timeout"


class StoreConflictError(DispatchError):
    """Lost a compare-and-set race; another process owns the task."""

    reason = "claimed_elsewhere"


class InvalidTransitionError(Exception):
    """Attempted a status change the task lifecycle does not allow."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Invalid task transition {current} -> {target}")
        self.current = current
        self.target = target
