"""Application factory for the signup API.

Builds the long-lived collaborators once (mailing-list client, optional rate
limiter), stores them on ``app.state`` and closes them on shutdown. Tests pass
their own fakes instead of touching module globals.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from signup_api.adapters.mailing_list.base import AbstractMailingListClient
from signup_api.adapters.mailing_list.convertkit import ConvertKitClient
from signup_api.adapters.rate_limit.base import AbstractRateLimiter
from signup_api.adapters.rate_limit.factory import create_rate_limiter
from signup_api.api.routes import health_router, subscribe_router
from signup_api.core.config import Settings, settings as default_settings
from signup_api.core.exception_handlers import setup_exception_handlers
from signup_api.core.logging import configure_logging
from signup_api.core.middleware import request_id_middleware
from signup_api.core.rate_limit import rate_limit_middleware
from signup_api.services.subscription_service import SubscriptionService

_UNSET = object()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close pooled HTTP connections on shutdown."""
    yield

    await app.state.mailing_list_client.aclose()
    if app.state.rate_limiter is not None:
        await app.state.rate_limiter.aclose()


def create_app(
    *,
    settings: Settings | None = None,
    mailing_list_client: AbstractMailingListClient | None = None,
    rate_limiter: AbstractRateLimiter | None | object = _UNSET,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to use; the environment-loaded global by default.
        mailing_list_client: Provider adapter; ConvertKit over httpx by default.
        rate_limiter: Limiter to use, ``None`` to disable rate limiting, or
            omitted to build one from ``settings.rate_limit``.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    if mailing_list_client is None:
        mailing_list_client = ConvertKitClient(
            base_url=cfg.provider.base_url,
            timeout_seconds=cfg.provider.timeout_seconds,
        )
    if rate_limiter is _UNSET:
        rate_limiter = create_rate_limiter(cfg.rate_limit)

    app = FastAPI(
        title="Newsletter Signup API",
        description=(
            "Accepts an email address from the public signup form and forwards "
            "it to the mailing-list provider, behind validation, a honeypot "
            "and per-client rate limiting."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.mailing_list_client = mailing_list_client
    app.state.rate_limiter = rate_limiter
    app.state.subscription_service = SubscriptionService(
        client=mailing_list_client,
        provider=cfg.provider,
    )

    # Middleware: the last one added runs first, so request ids wrap rate limiting
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(subscribe_router, prefix=cfg.app.subscribe_path)
    app.include_router(health_router)

    return app
