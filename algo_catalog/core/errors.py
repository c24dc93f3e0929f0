"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    field: str
    max_value: int
    actual_value: int
    retry_after: int
    submission_id: str
    algorithm_id: str
    status: str
    path: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input fails validation."""


class PayloadTooLargeAppError(ValidationAppError):
    """Raised when a request body exceeds the configured size cap."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""


class AlgorithmNotFoundError(NotFoundAppError):
    """No approved catalog entry has the requested id."""


class SubmissionNotFoundError(NotFoundAppError):
    """No pending submission has the requested id."""


class SubmissionAlreadyReviewedError(SubmissionNotFoundError):
    """The submission exists but was already approved or rejected."""


@dataclass
class RateLimitAppError(AppError):
    """Raised when a caller exceeds a rate limit budget."""

    headers: dict[str, str] | None = None


class StorageAppError(AppError):
    """Raised when the catalog file cannot be read, parsed, or written."""
