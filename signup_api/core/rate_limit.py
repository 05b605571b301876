"""Rate limiting middleware for the subscription endpoint.

Runs before routing. Only ``POST`` requests to the subscribe path are
counted; everything else (health checks, 405 probes) passes straight through.

The limiter is an optional capability read from ``app.state.rate_limiter``:
when it is ``None`` (store not configured) every request is admitted.

Store failures fail open: the error is logged and the request admitted,
since this is abuse mitigation rather than a correctness guarantee.

Usage:
    app.middleware("http")(rate_limit_middleware)
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request, Response

from signup_api.adapters.rate_limit.base import AbstractRateLimiter
from signup_api.core.config import Settings, settings
from signup_api.core.errors import RateLimitStoreError
from signup_api.core.responses import json_outcome
from signup_api.schemas.subscription import Outcome

logger = logging.getLogger(__name__)

# Shared bucket for callers without a forwarded address.
UNKNOWN_CLIENT_KEY = "unknown"


def build_rate_limit_key(request: Request) -> str:
    """Return the first ``X-Forwarded-For`` entry, trimmed, or ``"unknown"``."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if not forwarded_for:
        return UNKNOWN_CLIENT_KEY
    return forwarded_for.split(",")[0].strip() or UNKNOWN_CLIENT_KEY


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing client IPs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def _is_rate_limited_route(request: Request, app_settings: Settings) -> bool:
    return request.method == "POST" and request.url.path.startswith(
        app_settings.app.subscribe_path
    )


async def rate_limit_middleware(request: Request, call_next) -> Response:
    """Admit or reject a request before it reaches the subscribe handler.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response, or a 429 JSON response with
            ``Retry-After`` when the caller's window is full.
    """
    app_settings: Settings = getattr(request.app.state, "settings", settings)
    limiter: AbstractRateLimiter | None = getattr(request.app.state, "rate_limiter", None)

    if limiter is None or not _is_rate_limited_route(request, app_settings):
        return await call_next(request)

    key = build_rate_limit_key(request)
    try:
        result = await limiter.consume(key)
    except RateLimitStoreError as exc:
        logger.exception(
            "rate_limit.store_error",
            extra={"error_code": exc.code, "key_hash": _hash_limiter_key(key)},
        )
        return await call_next(request)

    if result.allowed:
        return await call_next(request)

    retry_after = result.retry_after_seconds or limiter.window_seconds
    logger.debug(
        "rate_limit.exceeded",
        extra={
            "key_hash": _hash_limiter_key(key),
            "limit": result.limit,
            "window_s": limiter.window_seconds,
            "retry_after_s": retry_after,
        },
    )
    return json_outcome(Outcome.RATE_LIMITED, headers={"Retry-After": str(retry_after)})
