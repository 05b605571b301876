"""Rate limiter interfaces.

The HTTP layer depends on this abstraction only, so the shared Upstash store
and the in-process limiter are interchangeable (and fakeable in tests).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Decision for a single rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Requests still admitted in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the caller's window clears.
        retry_after_seconds: Whole seconds to wait when blocked, else None.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


def validate_limits(limit: int, window_seconds: int) -> None:
    if limit < 1:
        raise ValueError("limit must be >= 1")
    if window_seconds < 1:
        raise ValueError("window_seconds must be >= 1")


def validate_consume_args(key: str, cost: int) -> None:
    if cost < 1:
        raise ValueError("cost must be >= 1")
    if not key:
        raise ValueError("key must be a non-empty string")


class AbstractRateLimiter(ABC):
    """Interface for sliding-window rate limiters."""

    limit: int
    window_seconds: int

    @abstractmethod
    async def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Check the key's window and, if admitted, record the request.

        Check and increment happen as one atomic step per key.

        Args:
            key: Caller identifier (e.g., client IP).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release any network resources held by the limiter."""
        return None
