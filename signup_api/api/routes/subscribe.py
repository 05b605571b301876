"""Newsletter signup endpoint.

Accepts either a JSON body (``fetch`` from the page script) or a native
``application/x-www-form-urlencoded`` form post, and answers in the matching
shape: JSON with a status code, or a 303 redirect to a success/error page.
Mounted by the app factory at ``settings.app.subscribe_path``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import APIRouter, Depends, Request, Response

from signup_api.core.config import Settings, settings
from signup_api.core.responses import encode_outcome
from signup_api.schemas.subscription import Outcome, RequestMode, SubmissionRequest
from signup_api.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Subscribe"])

HONEYPOT_FIELD = "website"
EMAIL_FIELD = "email"

_MEDIA_TYPES = {
    "application/json": RequestMode.JSON,
    "application/x-www-form-urlencoded": RequestMode.FORM,
}


def negotiate_request_mode(content_type: str | None) -> RequestMode:
    """Classify the request by its media type, ignoring parameters like charset."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return _MEDIA_TYPES.get(media_type, RequestMode.UNSUPPORTED)


def _text_field(payload: Mapping[str, Any], name: str) -> str:
    # Falsy JSON values (null, false, 0, "", [], {}) count as absent.
    value = payload.get(name)
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


async def parse_submission(request: Request, mode: RequestMode) -> SubmissionRequest | None:
    """Read the honeypot and email fields from the body.

    Args:
        request: Incoming request.
        mode: JSON or FORM (already negotiated).

    Returns:
        SubmissionRequest, or None if the body cannot be parsed under ``mode``.
    """
    payload: Mapping[str, Any]
    if mode is RequestMode.JSON:
        try:
            payload = await request.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
    else:
        try:
            payload = await request.form()
        except ValueError:
            return None

    return SubmissionRequest(
        mode=mode,
        honeypot_value=_text_field(payload, HONEYPOT_FIELD),
        email=_text_field(payload, EMAIL_FIELD),
    )


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", settings)


def get_subscription_service(request: Request) -> SubscriptionService:
    return request.app.state.subscription_service


@router.post("", summary="Subscribe an email address to the newsletter")
async def subscribe(
    request: Request,
    service: SubscriptionService = Depends(get_subscription_service),
    app_settings: Settings = Depends(get_settings),
) -> Response:
    """Subscribe endpoint.

    Body (JSON or urlencoded): ``email`` and the hidden honeypot ``website``.

    Returns:
        JSON ``{"ok": true}`` / ``{"error": "..."}`` for JSON requests, a 303
        redirect for form posts, 415 JSON for any other content type.
    """
    mode = negotiate_request_mode(request.headers.get("content-type"))
    if mode is RequestMode.UNSUPPORTED:
        return encode_outcome(Outcome.UNSUPPORTED_MEDIA, mode)

    submission = await parse_submission(request, mode)
    if submission is None:
        logger.info("subscribe.malformed_body", extra={"mode": mode.value})
        outcome = Outcome.MALFORMED_BODY
    else:
        outcome = await service.submit(submission)

    return encode_outcome(outcome, mode, app_settings.app)
