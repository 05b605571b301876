"""Rate limiting adapters.

The HTTP layer talks to ``AbstractRateLimiter`` only; the concrete backend
(shared Upstash store or in-process window) is picked by ``create_rate_limiter``.
"""

from signup_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from signup_api.adapters.rate_limit.factory import create_rate_limiter
from signup_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from signup_api.adapters.rate_limit.upstash import UpstashSlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitResult",
    "UpstashSlidingWindowRateLimiter",
    "create_rate_limiter",
]
