"""AuditStore abstract interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from lessor.audit.models import AuditEvent


class AuditStore(ABC):
    """Abstract interface for audit storage.

    Append-only: events are never updated or deleted through this interface.
    """

    @abstractmethod
    async def save_event(self, event: AuditEvent) -> UUID:
        """Persist an audit event."""
        pass

    @abstractmethod
    async def get_event(self, event_id: UUID) -> AuditEvent | None:
        """Get an audit event by ID."""
        pass

    @abstractmethod
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
        """List events, most recent first.

        Args:
            organization_id: Restrict to one organization (None = all)
            actor_key: Restrict to one emitting component
            action: Restrict to one action
            task_id: Restrict to events about one task
            since: Only events created at or after this time
            limit: Maximum events to return
        """
        pass
