"""Factory for the process-wide rate limiter."""

from __future__ import annotations

import logging

from signup_api.adapters.rate_limit.base import AbstractRateLimiter
from signup_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from signup_api.adapters.rate_limit.upstash import UpstashSlidingWindowRateLimiter
from signup_api.core.config import RateLimitSettings

logger = logging.getLogger(__name__)


def create_rate_limiter(cfg: RateLimitSettings) -> AbstractRateLimiter | None:
    """Build the limiter selected by configuration.

    Returns ``None`` when rate limiting is off, which is also the outcome of
    ``auto`` without Upstash credentials: the middleware then admits every
    request (local development without a store).

    Args:
        cfg: Rate limit settings.

    Returns:
        A limiter instance, or None for pass-through mode.
    """
    backend = cfg.backend

    if backend == "none":
        logger.info("rate_limit.disabled", extra={"backend": backend})
        return None

    if backend == "memory":
        logger.info(
            "rate_limit.configured",
            extra={"backend": backend, "limit": cfg.requests, "window_s": cfg.window_seconds},
        )
        return InMemorySlidingWindowRateLimiter(
            limit=cfg.requests,
            window_seconds=cfg.window_seconds,
        )

    if not cfg.store_configured:
        logger.warning(
            "rate_limit.store_not_configured",
            extra={
                "backend": backend,
                "has_url": bool(cfg.upstash_url),
                "has_token": bool(cfg.upstash_token),
            },
        )
        return None

    logger.info(
        "rate_limit.configured",
        extra={"backend": "upstash", "limit": cfg.requests, "window_s": cfg.window_seconds},
    )
    return UpstashSlidingWindowRateLimiter(
        url=cfg.upstash_url or "",
        token=cfg.upstash_token or "",
        limit=cfg.requests,
        window_seconds=cfg.window_seconds,
        key_prefix=cfg.key_prefix,
    )
