"""Lead store implementations."""

from lessor.leads.store import LeadStore
from lessor.leads.stores.inmemory import InMemoryLeadStore
from lessor.leads.stores.postgres import PostgresLeadStore

__all__ = [
    "LeadStore",
    "InMemoryLeadStore",
    "PostgresLeadStore",
]
