"""Subscription pipeline: honeypot, validation, config check, upstream call.

Takes an already-parsed ``SubmissionRequest`` and returns an ``Outcome``.
Nothing here knows about HTTP responses; the route encodes the outcome as
JSON or as a redirect depending on how the caller submitted the form.

All failure detail (upstream status and body, missing config) goes to the
logs only. Nothing is retried.
"""

import logging

from signup_api.adapters.mailing_list.base import AbstractMailingListClient
from signup_api.core.config import FORM_ID_PATTERN, ProviderSettings
from signup_api.core.errors import UpstreamResponseError, UpstreamTransportError
from signup_api.schemas.subscription import Outcome, SubmissionRequest
from signup_api.utils.email import is_valid_email, normalize_email

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Turns one signup submission into an outcome, calling the provider at most once."""

    def __init__(self, client: AbstractMailingListClient, provider: ProviderSettings) -> None:
        """Initialize the service.

        Args:
            client: Mailing-list provider adapter.
            provider: Provider credentials; may be incomplete, which is checked per call.
        """
        self.client = client
        self.provider = provider

    def _config_is_valid(self) -> bool:
        has_api_key = bool(self.provider.api_key)
        has_form_id = bool(self.provider.form_id)
        form_id_numeric = bool(has_form_id and FORM_ID_PATTERN.match(self.provider.form_id or ""))

        if has_api_key and form_id_numeric:
            return True

        logger.error(
            "subscribe.config_error",
            extra={
                "has_api_key": has_api_key,
                "has_form_id": has_form_id,
                "form_id_numeric": form_id_numeric,
            },
        )
        return False

    async def submit(self, submission: SubmissionRequest) -> Outcome:
        """Run the submission through the pipeline.

        Args:
            submission: Parsed honeypot value and raw email.

        Returns:
            Outcome: SUCCESS, BOT_IGNORED, or the first failure encountered.
        """
        # Step 1: Honeypot. Bots get a success-shaped answer so they can't adapt.
        if submission.honeypot_value:
            logger.info("subscribe.bot_ignored", extra={"mode": submission.mode.value})
            return Outcome.BOT_IGNORED

        # Step 2: Normalize and validate
        email = normalize_email(submission.email)
        if not is_valid_email(email):
            return Outcome.VALIDATION_REJECTED

        # Step 3: Config check (never touch the provider with a bad list id)
        if not self._config_is_valid():
            return Outcome.CONFIG_ERROR

        # Step 4: Single upstream call
        try:
            upstream = await self.client.subscribe(
                list_id=self.provider.form_id or "",
                api_key=self.provider.api_key or "",
                email=email,
            )
        except UpstreamTransportError as exc:
            logger.error(
                "subscribe.upstream_transport_error",
                extra={"error_code": exc.code, "error_message": exc.message},
            )
            return Outcome.UPSTREAM_TRANSPORT_ERROR
        except UpstreamResponseError as exc:
            logger.error(
                "subscribe.upstream_bad_response",
                extra={"error_code": exc.code, "details": exc.details},
            )
            return Outcome.UPSTREAM_BAD_RESPONSE

        # Step 5: Interpret. Status alone is not enough, 200 can carry an error.
        if upstream.is_error:
            logger.error(
                "subscribe.upstream_rejected",
                extra={
                    "upstream_status": upstream.status_code,
                    "upstream_body": upstream.body,
                },
            )
            return Outcome.UPSTREAM_LOGICAL_ERROR

        logger.info("subscribe.succeeded", extra={"mode": submission.mode.value})
        return Outcome.SUCCESS
