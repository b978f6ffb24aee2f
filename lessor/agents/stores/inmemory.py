"""In-memory implementation of AgentStore."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from lessor.agents.models import Agent, AgentStatus
from lessor.agents.store import AgentStore

_UPDATABLE_FIELDS = frozenset({"last_error_message", "last_error_at"})


class InMemoryAgentStore(AgentStore):
    """In-memory implementation of AgentStore for testing and development.

    Reads return copies so callers never observe later writes through a
    stale reference.
    """

    def __init__(self) -> None:
        self._agents: dict[UUID, Agent] = {}
        self.status_writes = 0

    async def save(self, agent: Agent) -> None:
        self._agents[agent.id] = agent.model_copy()

    async def get(self, agent_id: UUID) -> Agent | None:
        agent = self._agents.get(agent_id)
        return agent.model_copy() if agent else None

    async def get_by_key(self, organization_id: UUID, agent_key: str) -> Agent | None:
        for agent in self._agents.values():
            if agent.organization_id == organization_id and agent.agent_key == agent_key:
                return agent.model_copy()
        return None

    async def list_enabled(self, organization_id: UUID) -> list[Agent]:
        results = [
            agent.model_copy()
            for agent in self._agents.values()
            if agent.organization_id == organization_id and agent.is_enabled
        ]
        results.sort(key=lambda a: a.agent_key)
        return results

    async def list_organization_ids(self) -> list[UUID]:
        org_ids = {a.organization_id for a in self._agents.values() if a.is_enabled}
        return sorted(org_ids, key=str)

    async def update_status(
        self,
        agent_id: UUID,
        status: AgentStatus,
        *,
        expected_status: AgentStatus | None = None,
        **fields: Any,
    ) -> bool:
        agent = self._agents.get(agent_id)
        if agent is None:
            return False
        if expected_status is not None and agent.status != expected_status:
            return False

        update: dict[str, Any] = {"status": status, "updated_at": datetime.now(UTC)}
        for key, value in fields.items():
            if key in _UPDATABLE_FIELDS:
                update[key] = value

        self._agents[agent_id] = agent.model_copy(update=update)
        self.status_writes += 1
        return True
