"""Global exception handlers.

The subscribe pipeline turns every expected failure into an outcome, so what
is left here is routing-level rejections and the unexpected. The caller gets
the same ``{"error": "..."}`` shape as everywhere else and no implementation
detail.
"""

import logging

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from signup_api.core.config import settings
from signup_api.core.logging import get_request_id
from signup_api.core.responses import encode_outcome
from signup_api.schemas.subscription import Outcome, RequestMode

logger = logging.getLogger(__name__)


async def routing_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Answer any non-POST method on the subscribe path with the JSON 405 outcome.

    Starlette raises 405 for every method the router does not list, including
    extension methods such as TRACE or PROPFIND. Other HTTP errors keep
    FastAPI's default rendering.
    """
    cfg = getattr(request.app.state, "settings", settings)
    if exc.status_code == 405 and request.url.path.startswith(cfg.app.subscribe_path):
        return encode_outcome(
            Outcome.METHOD_NOT_ALLOWED,
            RequestMode.JSON,
            headers={"Allow": "POST"},
        )
    return await http_exception_handler(request, exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure with request context and answer a generic 500.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with a generic error and caching disabled.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred. Please try again later."},
        headers={"Cache-Control": "no-store"},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the routing and fallback handlers with the FastAPI app."""
    app.exception_handler(StarletteHTTPException)(routing_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
