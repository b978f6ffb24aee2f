"""Agent registry: automation units and their operational status."""

from lessor.agents.models import (
    PROTECTED_STATUSES,
    Agent,
    AgentStatus,
    health_transition,
)
from lessor.agents.store import AgentStore
from lessor.agents.stores.inmemory import InMemoryAgentStore

__all__ = [
    "Agent",
    "AgentStatus",
    "PROTECTED_STATUSES",
    "health_transition",
    "AgentStore",
    "InMemoryAgentStore",
]
