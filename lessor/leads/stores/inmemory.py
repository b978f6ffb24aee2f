"""In-memory implementation of LeadStore."""

from datetime import UTC, datetime
from uuid import UUID

from lessor.leads.models import Lead
from lessor.leads.store import LeadStore


class InMemoryLeadStore(LeadStore):
    """In-memory implementation of LeadStore for testing and development."""

    def __init__(self) -> None:
        self._leads: dict[UUID, Lead] = {}

    async def save(self, lead: Lead) -> None:
        self._leads[lead.id] = lead.model_copy()

    async def get(self, lead_id: UUID) -> Lead | None:
        lead = self._leads.get(lead_id)
        return lead.model_copy() if lead else None

    async def set_human_control(
        self,
        lead_id: UUID,
        controlled: bool,
        user_id: UUID | None = None,
    ) -> bool:
        lead = self._leads.get(lead_id)
        if lead is None:
            return False

        self._leads[lead_id] = lead.model_copy(
            update={
                "is_human_controlled": controlled,
                "human_controlled_by": user_id if controlled else None,
                "human_controlled_at": datetime.now(UTC) if controlled else None,
            }
        )
        return True
