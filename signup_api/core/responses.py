"""Outcome encoders: one pipeline result, two response shapes.

Script-driven clients (``application/json``) get a JSON body with a specific
status code. Native browser form posts get a 303 redirect to one of two
marker URLs, so the browser follows up with a GET instead of re-posting;
why a submission failed is only visible in the logs.

Every response produced here disables caching.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse, RedirectResponse, Response

from signup_api.core.config import AppSettings, settings
from signup_api.schemas.subscription import Outcome, RequestMode

NO_STORE_HEADERS = {"Cache-Control": "no-store"}

# (status code, public message). Messages never echo submitted input.
OUTCOME_STATUS: dict[Outcome, tuple[int, str | None]] = {
    Outcome.SUCCESS: (200, None),
    Outcome.BOT_IGNORED: (200, None),
    Outcome.MALFORMED_BODY: (400, "Invalid request body."),
    Outcome.VALIDATION_REJECTED: (
        422,
        "Please enter a valid email address.",
    ),
    Outcome.CONFIG_ERROR: (
        500,
        "Server configuration error. Please try again later.",
    ),
    Outcome.UPSTREAM_TRANSPORT_ERROR: (
        502,
        "Network error. Please try again.",
    ),
    Outcome.UPSTREAM_BAD_RESPONSE: (
        502,
        "Unexpected response from email service. Please try again.",
    ),
    Outcome.UPSTREAM_LOGICAL_ERROR: (
        422,
        "Could not subscribe. Please try again.",
    ),
    Outcome.RATE_LIMITED: (
        429,
        "Too many requests. Please try again later.",
    ),
    Outcome.UNSUPPORTED_MEDIA: (
        415,
        "Unsupported content type.",
    ),
    Outcome.METHOD_NOT_ALLOWED: (
        405,
        "Method not allowed.",
    ),
}

# These are answered in JSON whatever the request's content type.
JSON_ONLY_OUTCOMES = frozenset(
    {Outcome.UNSUPPORTED_MEDIA, Outcome.METHOD_NOT_ALLOWED, Outcome.RATE_LIMITED}
)


def json_outcome(outcome: Outcome, headers: dict[str, str] | None = None) -> JSONResponse:
    """Encode an outcome as ``{"ok": true}`` or ``{"error": "..."}``."""
    status_code, message = OUTCOME_STATUS[outcome]
    content = {"ok": True} if outcome.is_success else {"error": message}
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={**NO_STORE_HEADERS, **(headers or {})},
    )


def redirect_outcome(outcome: Outcome, app_settings: AppSettings | None = None) -> RedirectResponse:
    """Encode an outcome as a 303 to the success or error marker URL."""
    cfg = app_settings or settings.app
    url = cfg.success_redirect_url if outcome.is_success else cfg.error_redirect_url
    return RedirectResponse(
        url=url,
        status_code=303,
        headers=NO_STORE_HEADERS,
    )


def encode_outcome(
    outcome: Outcome,
    mode: RequestMode,
    app_settings: AppSettings | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    """Map ``Outcome x RequestMode`` to a concrete response.

    Args:
        outcome: Pipeline result.
        mode: How the request body was submitted.
        app_settings: Redirect targets; global settings when omitted.
        headers: Extra headers for JSON responses (e.g., ``Allow``, ``Retry-After``).

    Returns:
        Response: JSON for JSON mode and JSON-only outcomes, otherwise a 303.
    """
    if mode is RequestMode.FORM and outcome not in JSON_ONLY_OUTCOMES:
        return redirect_outcome(outcome, app_settings)
    return json_outcome(outcome, headers)
