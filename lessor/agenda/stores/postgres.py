"""PostgreSQL implementation of TaskStore.

Tasks live in `agent_tasks`. Due-task selection is backed by the
partial index on scheduled_for for pending rows.
"""

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from lessor.agenda.errors import InvalidTransitionError
from lessor.agenda.models import Task, TaskStatus, can_transition
from lessor.agenda.store import TaskStore
from lessor.db.errors import ConnectionError
from lessor.db.pool import PostgresPool
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, organization_id, lead_id, agent_key, action_kind, scheduled_for,
    status, pause_reason, paused_at, executed_at, completed_at, last_error,
    context, created_at
"""

# Columns compare_and_set_status may write besides status
_UPDATABLE_FIELDS = ("pause_reason", "paused_at", "executed_at", "completed_at", "last_error")


class PostgresTaskStore(TaskStore):
    """PostgreSQL implementation of TaskStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def save(self, task: Task) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO agent_tasks ({_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14)
                    ON CONFLICT (id) DO UPDATE SET
                        agent_key = EXCLUDED.agent_key,
                        action_kind = EXCLUDED.action_kind,
                        scheduled_for = EXCLUDED.scheduled_for,
                        status = EXCLUDED.status,
                        pause_reason = EXCLUDED.pause_reason,
                        paused_at = EXCLUDED.paused_at,
                        executed_at = EXCLUDED.executed_at,
                        completed_at = EXCLUDED.completed_at,
                        last_error = EXCLUDED.last_error,
                        context = EXCLUDED.context
                    """,
                    task.id,
                    task.organization_id,
                    task.subject_id,
                    task.agent_key,
                    task.action_kind,
                    task.scheduled_for,
                    task.status.value,
                    task.pause_reason,
                    task.paused_at,
                    task.executed_at,
                    task.completed_at,
                    task.last_error,
                    json.dumps(task.payload, default=str),
                    task.created_at,
                )
        except Exception as e:
            logger.error("postgres_save_task_error", task_id=str(task.id), error=str(e))
            raise ConnectionError(f"Failed to save task: {e}", cause=e) from e

    async def get(self, task_id: UUID) -> Task | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM agent_tasks WHERE id = $1",
                    task_id,
                )
                return self._row_to_task(row) if row else None
        except Exception as e:
            logger.error("postgres_get_task_error", task_id=str(task_id), error=str(e))
            raise ConnectionError(f"Failed to get task: {e}", cause=e) from e

    async def get_due_tasks(
        self,
        before: datetime,
        limit: int = 20,
    ) -> list[Task]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS} FROM agent_tasks
                    WHERE status = 'pending' AND scheduled_for <= $1
                    ORDER BY scheduled_for ASC
                    LIMIT $2
                    """,
                    before,
                    limit,
                )
                return [self._row_to_task(row) for row in rows]
        except Exception as e:
            logger.error("postgres_get_due_tasks_error", error=str(e))
            raise ConnectionError(f"Failed to fetch due tasks: {e}", cause=e) from e

    async def list_subject_tasks(
        self,
        organization_id: UUID,
        subject_id: UUID,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        params: list[Any] = [organization_id, subject_id]
        status_clause = ""
        if status is not None:
            params.append(status.value)
            status_clause = "AND status = $3"

        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS} FROM agent_tasks
                    WHERE organization_id = $1 AND lead_id = $2 {status_clause}
                    ORDER BY scheduled_for ASC
                    """,
                    *params,
                )
                return [self._row_to_task(row) for row in rows]
        except Exception as e:
            logger.error(
                "postgres_list_subject_tasks_error",
                subject_id=str(subject_id),
                error=str(e),
            )
            raise ConnectionError(f"Failed to list tasks: {e}", cause=e) from e

    async def compare_and_set_status(
        self,
        task_id: UUID,
        expected: TaskStatus,
        status: TaskStatus,
        **fields: Any,
    ) -> bool:
        if not can_transition(expected, status):
            raise InvalidTransitionError(expected.value, status.value)

        assignments = ["status = $3"]
        params: list[Any] = [task_id, expected.value, status.value]
        for key in _UPDATABLE_FIELDS:
            if key in fields:
                params.append(fields[key])
                assignments.append(f"{key} = ${len(params)}")

        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    UPDATE agent_tasks SET {', '.join(assignments)}
                    WHERE id = $1 AND status = $2
                    RETURNING id
                    """,
                    *params,
                )
                return row is not None
        except Exception as e:
            logger.error(
                "postgres_compare_and_set_status_error",
                task_id=str(task_id),
                expected=expected.value,
                status=status.value,
                error=str(e),
            )
            raise ConnectionError(f"Failed to update task status: {e}", cause=e) from e

    def _row_to_task(self, row: Any) -> Task:
        payload = row["context"]
        if isinstance(payload, str):
            payload = json.loads(payload)
        return Task(
            id=row["id"],
            organization_id=row["organization_id"],
            subject_id=row["lead_id"],
            agent_key=row["agent_key"],
            action_kind=row["action_kind"],
            scheduled_for=row["scheduled_for"],
            status=TaskStatus(row["status"]),
            pause_reason=row["pause_reason"],
            paused_at=row["paused_at"],
            executed_at=row["executed_at"],
            completed_at=row["completed_at"],
            last_error=row["last_error"],
            payload=payload or {},
            created_at=row["created_at"],
        )
