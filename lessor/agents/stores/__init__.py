"""Agent store implementations."""

from lessor.agents.store import AgentStore
from lessor.agents.stores.inmemory import InMemoryAgentStore
from lessor.agents.stores.postgres import PostgresAgentStore

__all__ = [
    "AgentStore",
    "InMemoryAgentStore",
    "PostgresAgentStore",
]
