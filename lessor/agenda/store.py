"""TaskStore abstract interface for agenda persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any
from uuid import UUID

from lessor.agenda.models import Task, TaskStatus


class TaskStore(ABC):
    """Abstract interface for task storage.

    Status changes go through compare_and_set_status only; it is the
    mutual-exclusion point between concurrent dispatchers.
    """

    @abstractmethod
    async def save(self, task: Task) -> None:
        """Save or update a task.

        Args:
            task: Task to persist
        """
        pass

    @abstractmethod
    async def get(self, task_id: UUID) -> Task | None:
        """Get a task by ID.

        Args:
            task_id: Task identifier

        Returns:
            Task if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_due_tasks(
        self,
        before: datetime,
        limit: int = 20,
    ) -> list[Task]:
        """Get tasks that are due for dispatch.

        Filters for status = PENDING and scheduled_for <= before.

        Args:
            before: Time threshold for due tasks
            limit: Maximum tasks to return

        Returns:
            List of due tasks ordered by scheduled_for ascending
        """
        pass

    @abstractmethod
    async def list_subject_tasks(
        self,
        organization_id: UUID,
        subject_id: UUID,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """Get all tasks for a lead.

        Args:
            organization_id: Organization identifier
            subject_id: Lead identifier
            status: Optional status filter

        Returns:
            List of tasks ordered by scheduled_for ascending
        """
        pass

    @abstractmethod
    async def compare_and_set_status(
        self,
        task_id: UUID,
        expected: TaskStatus,
        status: TaskStatus,
        **fields: Any,
    ) -> bool:
        """Atomically move a task from expected to status.

        Args:
            task_id: Task identifier
            expected: Status the task must currently have
            status: New status
            fields: Additional fields to set (executed_at, last_error, ...)

        Returns:
            True if this call applied the change, False if the task is
            missing or no longer in the expected status

        Raises:
            InvalidTransitionError: If the lifecycle forbids expected -> status
        """
        pass
