"""Database access: connection pool and store error hierarchy."""

from lessor.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from lessor.db.pool import PostgresPool

__all__ = [
    "ConflictError",
    "ConnectionError",
    "NotFoundError",
    "PostgresPool",
    "StoreError",
    "ValidationError",
]
