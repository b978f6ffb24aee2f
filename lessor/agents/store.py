"""AgentStore abstract interface."""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from lessor.agents.models import Agent, AgentStatus


class AgentStore(ABC):
    """Abstract interface for the agent registry.

    Status writes are single-row and may be made conditional on the
    status the writer last read.
    """

    @abstractmethod
    async def save(self, agent: Agent) -> None:
        """Save or update an agent."""
        pass

    @abstractmethod
    async def get(self, agent_id: UUID) -> Agent | None:
        """Get an agent by ID."""
        pass

    @abstractmethod
    async def get_by_key(self, organization_id: UUID, agent_key: str) -> Agent | None:
        """Get an agent by its key within an organization.

        Args:
            organization_id: Organization scope
            agent_key: Agent key

        Returns:
            Agent if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_enabled(self, organization_id: UUID) -> list[Agent]:
        """List enabled agents for an organization, ordered by agent_key."""
        pass

    @abstractmethod
    async def list_organization_ids(self) -> list[UUID]:
        """List organizations that have at least one enabled agent."""
        pass

    @abstractmethod
    async def update_status(
        self,
        agent_id: UUID,
        status: AgentStatus,
        *,
        expected_status: AgentStatus | None = None,
        **fields: Any,
    ) -> bool:
        """Update agent status and error fields.

        Args:
            agent_id: Agent identifier
            status: New status
            expected_status: Apply only if the current status equals this
            fields: last_error_message / last_error_at

        Returns:
            True if the row was updated
        """
        pass
