"""Store error hierarchy.

All store implementations raise these errors so callers can tell a
backend outage (abort the run) from an ordinary miss (handle locally).
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the store backend is unreachable or a query fails.

    This is the catastrophic case for a dispatcher batch or health run.
    """

    pass


class NotFoundError(StoreError):
    """Raised when a specific entity lookup fails.

    Not raised for empty query results.
    """

    pass


class ConflictError(StoreError):
    """Raised on unique constraint violation."""

    pass


class ValidationError(StoreError):
    """Raised when a row cannot be mapped to a model."""

    pass
