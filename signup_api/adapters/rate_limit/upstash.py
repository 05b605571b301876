"""Sliding-window rate limiter backed by Upstash Redis over its REST API.

The whole check-and-record step runs as one Lua script (``EVAL``) inside
Redis, so concurrent requests for the same key across any number of workers
cannot both take the last slot.

Each key is a sorted set of admitted request ids scored by their timestamp
in milliseconds. The script drops members older than the window, counts
what is left, and adds the new member only when under the limit.
"""

from __future__ import annotations

import math
import time
import uuid
from typing import Any, Callable

import httpx

from signup_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitResult,
    validate_consume_args,
    validate_limits,
)
from signup_api.core.errors import RateLimitStoreError

SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
local member = ARGV[4]
local cost = tonumber(ARGV[5])

redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
local count = redis.call('ZCARD', key)
local allowed = 0
if count + cost <= limit then
  for i = 1, cost do
    redis.call('ZADD', key, now, member .. ':' .. i)
  end
  redis.call('PEXPIRE', key, window)
  count = count + cost
  allowed = 1
end

local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
if oldest[2] then
  return {allowed, count, tonumber(oldest[2])}
end
return {allowed, count}
"""


class UpstashSlidingWindowRateLimiter(AbstractRateLimiter):
    """Shared-store limiter: at most ``limit`` units per key per trailing window."""

    def __init__(
        self,
        *,
        url: str,
        token: str,
        limit: int,
        window_seconds: int,
        key_prefix: str = "ratelimit",
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            url: Upstash REST endpoint (``UPSTASH_REDIS_REST_URL``).
            token: Upstash REST token (``UPSTASH_REDIS_REST_TOKEN``).
            limit: Maximum number of allowed units per window.
            window_seconds: Size of the sliding window in seconds.
            key_prefix: Namespace prepended to every store key.
            client: Optional pre-built httpx client (closed by the caller).
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        validate_limits(limit, window_seconds)

        self.limit = limit
        self.window_seconds = window_seconds
        self._url = url.rstrip("/")
        self._key_prefix = key_prefix
        self._clock = clock
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        self._headers = {"Authorization": f"Bearer {token}"}

    def _store_key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}" if self._key_prefix else key

    async def _eval(self, script: str, keys: list[str], args: list[Any]) -> Any:
        command = ["EVAL", script, str(len(keys)), *keys, *(str(a) for a in args)]
        try:
            response = await self._client.post(self._url, json=command, headers=self._headers)
        except httpx.HTTPError as exc:
            raise RateLimitStoreError(
                code="rate_limit_store_unreachable",
                message=f"Rate limit store request failed: {type(exc).__name__}",
                details={"error_type": type(exc).__name__},
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise RateLimitStoreError(
                code="rate_limit_store_bad_response",
                message="Rate limit store returned a non-JSON body",
                details={"http_status": response.status_code},
            ) from exc

        if response.is_error or not isinstance(payload, dict) or "error" in payload:
            error = payload.get("error") if isinstance(payload, dict) else None
            raise RateLimitStoreError(
                code="rate_limit_store_error",
                message=f"Rate limit store rejected the command: {error or 'unknown error'}",
                details={"http_status": response.status_code},
            )

        return payload.get("result")

    async def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        validate_consume_args(key, cost)

        now_ms = int(self._clock() * 1000)
        window_ms = self.window_seconds * 1000
        result = await self._eval(
            SLIDING_WINDOW_SCRIPT,
            [self._store_key(key)],
            [now_ms, window_ms, self.limit, uuid.uuid4().hex, cost],
        )

        if not isinstance(result, list) or len(result) < 2:
            raise RateLimitStoreError(
                code="rate_limit_store_bad_response",
                message="Rate limit script returned an unexpected result",
            )

        allowed = int(result[0]) == 1
        count = int(result[1])
        oldest_ms = int(result[2]) if len(result) > 2 else now_ms
        reset_ms = oldest_ms + window_ms

        if allowed:
            return RateLimitResult(
                allowed=True,
                limit=self.limit,
                remaining=max(0, self.limit - count),
                reset_at=int(math.ceil(reset_ms / 1000)),
                retry_after_seconds=None,
            )

        retry_after = min(
            self.window_seconds,
            max(1, int(math.ceil((reset_ms - now_ms) / 1000))),
        )
        return RateLimitResult(
            allowed=False,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_at=int(math.ceil(reset_ms / 1000)),
            retry_after_seconds=retry_after,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
