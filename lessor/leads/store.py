"""LeadStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from lessor.leads.models import Lead


class LeadStore(ABC):
    """Abstract interface for lead storage.

    The orchestration layer reads leads and owns only the human-control flag.
    """

    @abstractmethod
    async def save(self, lead: Lead) -> None:
        """Save or update a lead."""
        pass

    @abstractmethod
    async def get(self, lead_id: UUID) -> Lead | None:
        """Get a lead by ID."""
        pass

    @abstractmethod
    async def set_human_control(
        self,
        lead_id: UUID,
        controlled: bool,
        user_id: UUID | None = None,
    ) -> bool:
        """Set or clear the human-control flag.

        Args:
            lead_id: Lead identifier
            controlled: New flag value
            user_id: Person taking control (ignored when clearing)

        Returns:
            True if the lead exists and was updated
        """
        pass
