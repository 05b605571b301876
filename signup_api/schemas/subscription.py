"""Transient request/result types for the subscription pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RequestMode(str, Enum):
    """How the caller submitted the form, which decides the response shape."""

    JSON = "json"
    FORM = "form"
    UNSUPPORTED = "unsupported"


class Outcome(str, Enum):
    """Terminal result of one pass through the subscription pipeline."""

    SUCCESS = "success"
    BOT_IGNORED = "bot_ignored"
    MALFORMED_BODY = "malformed_body"
    VALIDATION_REJECTED = "validation_rejected"
    CONFIG_ERROR = "config_error"
    UPSTREAM_TRANSPORT_ERROR = "upstream_transport_error"
    UPSTREAM_BAD_RESPONSE = "upstream_bad_response"
    UPSTREAM_LOGICAL_ERROR = "upstream_logical_error"
    RATE_LIMITED = "rate_limited"
    UNSUPPORTED_MEDIA = "unsupported_media"
    METHOD_NOT_ALLOWED = "method_not_allowed"

    @property
    def is_success(self) -> bool:
        # Bots get the same answer as humans.
        return self in (Outcome.SUCCESS, Outcome.BOT_IGNORED)


@dataclass(frozen=True)
class SubmissionRequest:
    """Fields extracted from one inbound signup body.

    Attributes:
        mode: Intake mode the body was parsed under.
        honeypot_value: Value of the hidden ``website`` field; empty for humans.
        email: Raw email as submitted, before trimming and lowercasing.
    """

    mode: RequestMode
    honeypot_value: str
    email: str


@dataclass(frozen=True)
class UpstreamResponse:
    """Decoded answer from the mailing-list provider."""

    status_code: int
    body: Any

    @property
    def is_error(self) -> bool:
        """Whether the provider rejected the subscription.

        The provider can answer 200 with an ``error`` field, so the body is
        always inspected in addition to the status code.
        """
        if not 200 <= self.status_code < 300:
            return True
        if not isinstance(self.body, dict):
            return True
        return bool(self.body.get("error"))
