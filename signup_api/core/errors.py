"""Application-level exception types.

Adapters raise these; the subscription service turns them into outcomes so
none of them ever reaches the caller as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Fields are optional; only what is known at the raise site is filled in.
    """

    http_status: int
    error_type: str


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


class UpstreamTransportError(AppError):
    """Raised when the mailing-list provider cannot be reached."""


class UpstreamResponseError(AppError):
    """Raised when the provider answers with a body that is not JSON."""


class RateLimitStoreError(AppError):
    """Raised when the rate-limit store call fails or answers unexpectedly."""
