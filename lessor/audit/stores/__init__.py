"""Audit store implementations."""

from lessor.audit.store import AuditStore
from lessor.audit.stores.inmemory import InMemoryAuditStore
from lessor.audit.stores.postgres import PostgresAuditStore

__all__ = [
    "AuditStore",
    "InMemoryAuditStore",
    "PostgresAuditStore",
]
