"""Client-level exception types.

Only construction-time validation errors ever reach callers of the public
entry point. Transport and serialization errors are raised by their adapters
and recovered into a SubmissionResult beneath it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Fields are optional so each error only carries what it knows.
    """

    time_unit: str
    request_limit: int
    status_code: int
    timeout_seconds: float
    url: str
    error_type: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for client failures.

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


class ValidationAppError(AppError, ValueError):
    """Raised when construction arguments or configuration are invalid."""


@dataclass
class TransportAppError(AppError):
    """Raised when the HTTP exchange with the registry fails.

    Attributes:
        timed_out: True when the failure was a timeout rather than a
            connectivity or protocol error.
    """

    timed_out: bool = False


class SerializationAppError(AppError):
    """Raised when a document cannot be rendered as JSON."""
