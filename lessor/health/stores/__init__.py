"""Health snapshot and credential store implementations."""

from lessor.health.store import CredentialStore, ProviderHealthStore
from lessor.health.stores.inmemory import InMemoryCredentialStore, InMemoryProviderHealthStore
from lessor.health.stores.postgres import PostgresCredentialStore, PostgresProviderHealthStore

__all__ = [
    "ProviderHealthStore",
    "CredentialStore",
    "InMemoryProviderHealthStore",
    "InMemoryCredentialStore",
    "PostgresProviderHealthStore",
    "PostgresCredentialStore",
]
