"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    LEAD_NOT_FOUND = "LEAD_NOT_FOUND"
    """The specified lead does not exist."""

    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    """The specified task does not exist."""

    TASK_NOT_CANCELLABLE = "TASK_NOT_CANCELLABLE"
    """The task was already claimed or reached a terminal status."""

    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"
    """No probe is registered for the specified provider."""

    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    """The storage backend could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "LEAD_NOT_FOUND",
                "message": "Lead 3f1c... not found"
            }
        }
    """

    error: ErrorBody
