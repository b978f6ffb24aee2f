"""API exception hierarchy for consistent error handling.

All API exceptions inherit from LessorAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses.
"""

from lessor.api.models.errors import ErrorCode


class LessorAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(LessorAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class LeadNotFoundError(LessorAPIError):
    """Raised when lead_id doesn't exist."""

    status_code = 404
    error_code = ErrorCode.LEAD_NOT_FOUND


class TaskNotFoundError(LessorAPIError):
    """Raised when task_id doesn't exist."""

    status_code = 404
    error_code = ErrorCode.TASK_NOT_FOUND


class TaskNotCancellableError(LessorAPIError):
    """Raised when a task is already claimed or finished."""

    status_code = 409
    error_code = ErrorCode.TASK_NOT_CANCELLABLE


class ProviderNotFoundError(LessorAPIError):
    """Raised when no probe exists for a provider."""

    status_code = 404
    error_code = ErrorCode.PROVIDER_NOT_FOUND


class StoreUnavailableError(LessorAPIError):
    """Raised when the storage backend is unreachable."""

    status_code = 503
    error_code = ErrorCode.STORE_UNAVAILABLE
