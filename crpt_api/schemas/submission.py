"""Value objects exchanged between the client facade and the dispatcher."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


class FailureKind(str, Enum):
    """Why a submission produced no status code."""

    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Submission:
    """One logical request to send a document.

    Attributes:
        payload: Serialized JSON document.
        signature: Opaque caller signature.
        submission_id: Correlation id used in logs.
    """

    payload: str
    signature: str
    submission_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __repr__(self) -> str:
        # Never print the payload or the signature
        return f"Submission(submission_id={self.submission_id!r}, payload_chars={len(self.payload)})"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submission: a status code or a failure kind, never both.

    Attributes:
        status_code: HTTP status returned by the registry, when one was received.
        failure: Failure kind when no status was received.
        detail: Short human-readable description of the failure.
    """

    status_code: int | None = None
    failure: FailureKind | None = None
    detail: str | None = None

    @classmethod
    def success(cls, status_code: int) -> SubmissionResult:
        return cls(status_code=status_code)

    @classmethod
    def failed(cls, failure: FailureKind, detail: str | None = None) -> SubmissionResult:
        return cls(failure=failure, detail=detail)

    @property
    def ok(self) -> bool:
        """True when a status code was received (whatever its value)."""
        return self.failure is None

    def to_status(self, failure_status: int = 400) -> int:
        """Collapse the result into the integer status seen by callers."""
        if self.status_code is None:
            return failure_status
        return self.status_code
