"""In-memory implementation of AuditStore."""

from datetime import datetime
from uuid import UUID

from lessor.audit.models import AuditEvent
from lessor.audit.store import AuditStore


class InMemoryAuditStore(AuditStore):
    """In-memory implementation of AuditStore for testing and development.

    Uses simple dict storage with linear scan for queries.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        self._events: dict[UUID, AuditEvent] = {}
        self._order: list[UUID] = []

    async def save_event(self, event: AuditEvent) -> UUID:
        """Persist an audit event."""
        if event.id not in self._events:
            self._order.append(event.id)
        self._events[event.id] = event
        return event.id

    async def get_event(self, event_id: UUID) -> AuditEvent | None:
        """Get an audit event by ID."""
        return self._events.get(event_id)

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
        results = []
        # Insertion order breaks ties between events created in the same instant
        for event_id in reversed(self._order):
            event = self._events[event_id]
            if organization_id is not None and event.organization_id != organization_id:
                continue
            if actor_key is not None and event.actor_key != actor_key:
                continue
            if action is not None and event.action != action:
                continue
            if task_id is not None and event.task_id != task_id:
                continue
            if since is not None and event.created_at < since:
                continue
            results.append(event)
            if len(results) >= limit:
                break
        return results

    @property
    def events(self) -> list[AuditEvent]:
        """All events in append order."""
        return [self._events[event_id] for event_id in self._order]
