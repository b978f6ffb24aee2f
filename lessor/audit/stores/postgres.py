"""PostgreSQL implementation of AuditStore.

Writes to the `agent_activity_log` table. Rows are insert-only.
"""

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from lessor.audit.models import AuditEvent, AuditStatus
from lessor.audit.store import AuditStore
from lessor.db.errors import ConnectionError
from lessor.db.pool import PostgresPool
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, organization_id, agent_key, action, status, message, details,
    lead_id, task_id, execution_ms, cost, created_at
"""


class PostgresAuditStore(AuditStore):
    """PostgreSQL implementation of AuditStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def save_event(self, event: AuditEvent) -> UUID:
        """Persist an audit event."""
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO agent_activity_log ({_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
                    ON CONFLICT (id) DO NOTHING
                    """,
                    event.id,
                    event.organization_id,
                    event.actor_key,
                    event.action,
                    event.status.value,
                    event.message,
                    json.dumps(event.details, default=str),
                    event.subject_id,
                    event.task_id,
                    event.execution_ms,
                    event.cost,
                    event.created_at,
                )
            return event.id
        except Exception as e:
            logger.error("postgres_save_event_error", event_id=str(event.id), error=str(e))
            raise ConnectionError(f"Failed to save audit event: {e}", cause=e) from e

    async def get_event(self, event_id: UUID) -> AuditEvent | None:
        """Get an audit event by ID."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM agent_activity_log WHERE id = $1",
                    event_id,
                )
                return self._row_to_event(row) if row else None
        except Exception as e:
            logger.error("postgres_get_event_error", event_id=str(event_id), error=str(e))
            raise ConnectionError(f"Failed to get audit event: {e}", cause=e) from e

    async def list_events(
        self,
        organization_id: UUID | None = None,
        *,
        actor_key: str | None = None,
        action: str | None = None,
        task_id: UUID | None = None,
        since: datetime | None = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """List events, most recent first."""
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (
            ("organization_id", organization_id),
            ("agent_key", actor_key),
            ("action", action),
            ("task_id", task_id),
        ):
            if value is not None:
                params.append(value)
                clauses.append(f"{column} = ${len(params)}")
        if since is not None:
            params.append(since)
            clauses.append(f"created_at >= ${len(params)}")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)

        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS} FROM agent_activity_log
                    {where}
                    ORDER BY created_at DESC
                    LIMIT ${len(params)}
                    """,
                    *params,
                )
                return [self._row_to_event(row) for row in rows]
        except Exception as e:
            logger.error("postgres_list_events_error", error=str(e))
            raise ConnectionError(f"Failed to list audit events: {e}", cause=e) from e

    def _row_to_event(self, row: Any) -> AuditEvent:
        details = row["details"]
        if isinstance(details, str):
            details = json.loads(details)
        return AuditEvent(
            id=row["id"],
            organization_id=row["organization_id"],
            actor_key=row["agent_key"],
            action=row["action"],
            status=AuditStatus(row["status"]),
            message=row["message"] or "",
            details=details or {},
            subject_id=row["lead_id"],
            task_id=row["task_id"],
            execution_ms=row["execution_ms"] or 0,
            cost=float(row["cost"] or 0),
            created_at=row["created_at"],
        )
