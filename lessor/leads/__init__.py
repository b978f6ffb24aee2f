"""Leads: the customer records automated tasks act on."""

from lessor.leads.models import Lead
from lessor.leads.store import LeadStore
from lessor.leads.stores.inmemory import InMemoryLeadStore

__all__ = [
    "Lead",
    "LeadStore",
    "InMemoryLeadStore",
]
