"""Audit trail: immutable decision records and the sink that stores them."""

from lessor.audit.logger import ActivityLogger, AuditActivityLogger
from lessor.audit.models import AuditEvent, AuditStatus
from lessor.audit.store import AuditStore

__all__ = [
    "ActivityLogger",
    "AuditActivityLogger",
    "AuditEvent",
    "AuditStatus",
    "AuditStore",
]
