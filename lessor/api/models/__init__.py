"""API request/response models."""

from lessor.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from lessor.api.models.requests import (
    ActivityResponse,
    CancelTaskRequest,
    CancelTaskResponse,
    ComponentHealth,
    HealthResponse,
    ReleaseRequest,
    ReleaseResponse,
    TakeoverRequest,
    TakeoverResponse,
)

__all__ = [
    "ErrorCode",
    "ErrorDetail",
    "ErrorBody",
    "ErrorResponse",
    "TakeoverRequest",
    "TakeoverResponse",
    "ReleaseRequest",
    "ReleaseResponse",
    "CancelTaskRequest",
    "CancelTaskResponse",
    "ActivityResponse",
    "ComponentHealth",
    "HealthResponse",
]
