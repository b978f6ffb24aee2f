"""Agenda: scheduled tasks, their lifecycle, and the dispatcher.

The dispatcher itself lives in lessor.agenda.dispatcher.
"""

from lessor.agenda.errors import (
    AgentDegradedError,
    AgentDisabledError,
    AgentNotFoundError,
    ComplianceBlockedError,
    ComplianceCheckError,
    DispatchError,
    HandlerError,
    HandlerNotFoundError,
    HandlerTimeoutError,
    InvalidTransitionError,
    StoreConflictError,
    SubjectNotFoundError,
)
from lessor.agenda.handlers import ActionHandler, HandlerOutcome, HandlerRegistry
from lessor.agenda.models import (
    TASK_TRANSITIONS,
    TERMINAL_STATUSES,
    ActionKind,
    BatchResult,
    Task,
    TaskOutcome,
    TaskResult,
    TaskStatus,
    can_transition,
)
from lessor.agenda.store import TaskStore
from lessor.agenda.stores.inmemory import InMemoryTaskStore

__all__ = [
    # Models
    "Task",
    "TaskStatus",
    "ActionKind",
    "TaskOutcome",
    "TaskResult",
    "BatchResult",
    "TASK_TRANSITIONS",
    "TERMINAL_STATUSES",
    "can_transition",
    # Errors
    "DispatchError",
    "SubjectNotFoundError",
    "AgentNotFoundError",
    "AgentDisabledError",
    "AgentDegradedError",
    "ComplianceBlockedError",
    "ComplianceCheckError",
    "HandlerError",
    "HandlerNotFoundError",
    "HandlerTimeoutError",
    "StoreConflictError",
    "InvalidTransitionError",
    # Handlers
    "ActionHandler",
    "HandlerOutcome",
    "HandlerRegistry",
    # Stores
    "TaskStore",
    "InMemoryTaskStore",
]
