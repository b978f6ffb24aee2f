"""Task store implementations."""

from lessor.agenda.store import TaskStore
from lessor.agenda.stores.inmemory import InMemoryTaskStore
from lessor.agenda.stores.postgres import PostgresTaskStore

__all__ = [
    "TaskStore",
    "InMemoryTaskStore",
    "PostgresTaskStore",
]
