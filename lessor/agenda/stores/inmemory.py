"""In-memory implementation of TaskStore."""

from datetime import datetime
from typing import Any
from uuid import UUID

from lessor.agenda.errors import InvalidTransitionError
from lessor.agenda.models import Task, TaskStatus, can_transition
from lessor.agenda.store import TaskStore

_UPDATABLE_FIELDS = frozenset(
    {"pause_reason", "paused_at", "executed_at", "completed_at", "last_error"}
)


class InMemoryTaskStore(TaskStore):
    """In-memory implementation of TaskStore for testing and development.

    Uses simple dict storage with linear scan for queries. The
    compare-and-set runs without awaiting, so it is atomic with respect
    to other coroutines on the same loop.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._tasks: dict[UUID, Task] = {}

    async def save(self, task: Task) -> None:
        """Save or update a task."""
        self._tasks[task.id] = task.model_copy()

    async def get(self, task_id: UUID) -> Task | None:
        """Get a task by ID."""
        task = self._tasks.get(task_id)
        return task.model_copy() if task else None

    async def get_due_tasks(
        self,
        before: datetime,
        limit: int = 20,
    ) -> list[Task]:
        """Get tasks that are due for dispatch."""
        results = [task.model_copy() for task in self._tasks.values() if task.is_due(before)]

        # Oldest due first
        results.sort(key=lambda t: t.scheduled_for)
        return results[:limit]

    async def list_subject_tasks(
        self,
        organization_id: UUID,
        subject_id: UUID,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """Get all tasks for a lead."""
        results = []

        for task in self._tasks.values():
            if task.organization_id != organization_id:
                continue
            if task.subject_id != subject_id:
                continue
            if status is not None and task.status != status:
                continue

            results.append(task.model_copy())

        results.sort(key=lambda t: t.scheduled_for)
        return results

    async def compare_and_set_status(
        self,
        task_id: UUID,
        expected: TaskStatus,
        status: TaskStatus,
        **fields: Any,
    ) -> bool:
        """Atomically move a task from expected to status."""
        if not can_transition(expected, status):
            raise InvalidTransitionError(expected.value, status.value)

        task = self._tasks.get(task_id)
        if task is None or task.status != expected:
            return False

        update: dict[str, Any] = {"status": status}
        for key, value in fields.items():
            if key in _UPDATABLE_FIELDS:
                update[key] = value

        self._tasks[task_id] = task.model_copy(update=update)
        return True
