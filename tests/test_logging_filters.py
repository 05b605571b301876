"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from signup_api.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


@pytest.fixture
def captured() -> tuple[logging.Logger, StringIO]:
    """Logger wired to an in-memory stream through the production filters."""
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_redacts_credentials(captured):
    logger, stream = captured

    logger.info(
        "test_event",
        extra={"api_key": "ck-secret-123", "token": "upstash-secret", "safe_field": "visible"},
    )

    output = stream.getvalue()
    assert "ck-secret-123" not in output
    assert "upstash-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_redacts_subscriber_email_inside_upstream_body(captured):
    logger, stream = captured

    logger.error(
        "subscribe.upstream_rejected",
        extra={
            "upstream_status": 200,
            "upstream_body": {
                "error": "already subscribed",
                "subscriber": {"email_address": "reader@example.com", "id": 7},
            },
        },
    )

    payload = json.loads(stream.getvalue())
    assert "reader@example.com" not in stream.getvalue()
    assert payload["upstream_status"] == 200
    assert payload["upstream_body"]["error"] == "already subscribed"
    assert payload["upstream_body"]["subscriber"]["email_address"] == "[REDACTED]"
    assert payload["upstream_body"]["subscriber"]["id"] == 7


def test_allows_safe_fields(captured):
    logger, stream = captured

    logger.info(
        "safe_event",
        extra={"route": "/api/subscribe", "status": 303, "has_api_key": False},
    )

    output = stream.getvalue()
    assert "/api/subscribe" in output
    assert "303" in output
    assert "has_api_key" in output
    assert "[REDACTED]" not in output


def test_request_id_is_attached_from_context(captured):
    logger, stream = captured

    set_request_id("req-abc")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-abc"
