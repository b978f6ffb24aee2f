"""Activity logger: the append-only sink core components write decisions to."""

from abc import ABC, abstractmethod

from lessor.audit.models import AuditEvent
from lessor.audit.store import AuditStore
from lessor.observability.logging import get_logger

logger = get_logger(__name__)


class ActivityLogger(ABC):
    """Append-only sink for audit events."""

    @abstractmethod
    async def append(self, event: AuditEvent) -> None:
        """Record an event. Must not raise."""
        pass


class AuditActivityLogger(ActivityLogger):
    """ActivityLogger backed by an AuditStore.

    A failed write is reported to the operational log and dropped; the
    decision it describes has already been applied to the task or agent.
    """

    def __init__(self, audit_store: AuditStore) -> None:
        self._store = audit_store

    async def append(self, event: AuditEvent) -> None:
        logger.debug(
            "audit_event",
            actor_key=event.actor_key,
            action=event.action,
            status=event.status.value,
            organization_id=str(event.organization_id) if event.organization_id else None,
            task_id=str(event.task_id) if event.task_id else None,
        )
        try:
            await self._store.save_event(event)
        except Exception as e:
            logger.warning(
                "activity_log_append_failed",
                event_id=str(event.id),
                action=event.action,
                error=str(e),
                error_type=type(e).__name__,
            )
