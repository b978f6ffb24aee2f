"""PostgreSQL implementation of AgentStore."""

from typing import Any
from uuid import UUID

from lessor.agents.models import Agent, AgentStatus
from lessor.agents.store import AgentStore
from lessor.db.errors import ConnectionError
from lessor.db.pool import PostgresPool
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, organization_id, agent_key, display_name, required_providers,
    is_enabled, status, last_error_message, last_error_at, updated_at
"""

_UPDATABLE_FIELDS = ("last_error_message", "last_error_at")


class PostgresAgentStore(AgentStore):
    """PostgreSQL implementation of AgentStore over `agents_registry`."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def save(self, agent: Agent) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO agents_registry ({_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                    ON CONFLICT (id) DO UPDATE SET
                        agent_key = EXCLUDED.agent_key,
                        display_name = EXCLUDED.display_name,
                        required_providers = EXCLUDED.required_providers,
                        is_enabled = EXCLUDED.is_enabled,
                        status = EXCLUDED.status,
                        last_error_message = EXCLUDED.last_error_message,
                        last_error_at = EXCLUDED.last_error_at,
                        updated_at = EXCLUDED.updated_at
                    """,
                    agent.id,
                    agent.organization_id,
                    agent.agent_key,
                    agent.display_name,
                    agent.required_providers,
                    agent.is_enabled,
                    agent.status.value,
                    agent.last_error_message,
                    agent.last_error_at,
                    agent.updated_at,
                )
        except Exception as e:
            logger.error("postgres_save_agent_error", agent_id=str(agent.id), error=str(e))
            raise ConnectionError(f"Failed to save agent: {e}", cause=e) from e

    async def get(self, agent_id: UUID) -> Agent | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM agents_registry WHERE id = $1",
                    agent_id,
                )
                return self._row_to_agent(row) if row else None
        except Exception as e:
            logger.error("postgres_get_agent_error", agent_id=str(agent_id), error=str(e))
            raise ConnectionError(f"Failed to get agent: {e}", cause=e) from e

    async def get_by_key(self, organization_id: UUID, agent_key: str) -> Agent | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_COLUMNS} FROM agents_registry
                    WHERE organization_id = $1 AND agent_key = $2
                    """,
                    organization_id,
                    agent_key,
                )
                return self._row_to_agent(row) if row else None
        except Exception as e:
            logger.error(
                "postgres_get_agent_by_key_error",
                organization_id=str(organization_id),
                agent_key=agent_key,
                error=str(e),
            )
            raise ConnectionError(f"Failed to get agent: {e}", cause=e) from e

    async def list_enabled(self, organization_id: UUID) -> list[Agent]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS} FROM agents_registry
                    WHERE organization_id = $1 AND is_enabled = true
                    ORDER BY agent_key
                    """,
                    organization_id,
                )
                return [self._row_to_agent(row) for row in rows]
        except Exception as e:
            logger.error(
                "postgres_list_agents_error",
                organization_id=str(organization_id),
                error=str(e),
            )
            raise ConnectionError(f"Failed to list agents: {e}", cause=e) from e

    async def list_organization_ids(self) -> list[UUID]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT DISTINCT organization_id FROM agents_registry
                    WHERE is_enabled = true
                    ORDER BY organization_id
                    """
                )
                return [row["organization_id"] for row in rows]
        except Exception as e:
            logger.error("postgres_list_organizations_error", error=str(e))
            raise ConnectionError(f"Failed to list organizations: {e}", cause=e) from e

    async def update_status(
        self,
        agent_id: UUID,
        status: AgentStatus,
        *,
        expected_status: AgentStatus | None = None,
        **fields: Any,
    ) -> bool:
        assignments = ["status = $2", "updated_at = NOW()"]
        params: list[Any] = [agent_id, status.value]
        for key in _UPDATABLE_FIELDS:
            if key in fields:
                params.append(fields[key])
                assignments.append(f"{key} = ${len(params)}")

        query = f"UPDATE agents_registry SET {', '.join(assignments)} WHERE id = $1"
        if expected_status is not None:
            params.append(expected_status.value)
            query += f" AND status = ${len(params)}"

        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(query, *params)
                return result.endswith(" 1")
        except Exception as e:
            logger.error(
                "postgres_update_agent_status_error",
                agent_id=str(agent_id),
                error=str(e),
            )
            raise ConnectionError(f"Failed to update agent status: {e}", cause=e) from e

    def _row_to_agent(self, row: Any) -> Agent:
        data = dict(row)
        data["required_providers"] = list(data.get("required_providers") or [])
        return Agent(**data)
