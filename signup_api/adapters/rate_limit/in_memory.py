"""In-process sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
  Use the Upstash backend when more than one worker serves the endpoint.
- Safe under concurrent requests: check and record happen under one lock.
- Buckets are dropped once every entry in them has expired, so spoofed
  client keys do not accumulate.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from typing import Callable

from signup_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitResult,
    validate_consume_args,
    validate_limits,
)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Admit at most ``limit`` units per key in any trailing ``window_seconds``.

    Each admitted unit is remembered with its timestamp; entries older than
    the window are dropped before every check, so the window slides with the
    clock instead of resetting on fixed boundaries.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_seconds: Size of the sliding window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        validate_limits(limit, window_seconds)

        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._events: dict[str, deque[float]] = {}
        self._next_sweep_at: float | None = None

    def _evict(self, events: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while events and events[0] <= cutoff:
            events.popleft()

    def _sweep(self, now: float) -> None:
        # Drop every bucket whose entries have all expired.
        cutoff = now - self.window_seconds
        stale = [key for key, events in self._events.items() if not events or events[-1] <= cutoff]
        for key in stale:
            del self._events[key]
        self._next_sweep_at = now + self.window_seconds

    async def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        validate_consume_args(key, cost)

        with self._lock:
            now = self._clock()
            if self._next_sweep_at is None or now >= self._next_sweep_at:
                self._sweep(now)

            events = self._events.get(key)
            if events is not None:
                self._evict(events, now)
                if not events:
                    del self._events[key]
                    events = None

            count = len(events) if events else 0
            if count + cost <= self.limit:
                if events is None:
                    events = self._events[key] = deque()
                events.extend([now] * cost)
                return RateLimitResult(
                    allowed=True,
                    limit=self.limit,
                    remaining=self.limit - len(events),
                    reset_at=int(math.ceil(events[0] + self.window_seconds)),
                    retry_after_seconds=None,
                )

            # Blocked: the window clears once enough of the oldest entries expire.
            if events:
                index = min(len(events) - 1, len(events) + cost - self.limit - 1)
                release_at = events[index] + self.window_seconds
            else:
                release_at = now + self.window_seconds
            retry_after = min(self.window_seconds, max(1, int(math.ceil(release_at - now))))
            return RateLimitResult(
                allowed=False,
                limit=self.limit,
                remaining=max(0, self.limit - count),
                reset_at=int(math.ceil(release_at)),
                retry_after_seconds=retry_after,
            )
