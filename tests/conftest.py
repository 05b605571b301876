"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``signup_api`` import so the global
settings object never picks up a developer's .env file or real credentials.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ["CONVERTKIT_API_KEY"] = "ck-test-key"
os.environ["CONVERTKIT_FORM_ID"] = "1234567"
os.environ["RATE_LIMIT_BACKEND"] = "none"
os.environ.pop("UPSTASH_REDIS_REST_URL", None)
os.environ.pop("UPSTASH_REDIS_REST_TOKEN", None)

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from signup_api.adapters.mailing_list.base import AbstractMailingListClient
from signup_api.core.app_factory import create_app
from signup_api.core.config import ProviderSettings, RateLimitSettings, Settings
from signup_api.schemas.subscription import UpstreamResponse


class FakeMailingListClient(AbstractMailingListClient):
    """In-memory provider stub recording every subscribe call."""

    def __init__(
        self,
        response: UpstreamResponse | None = None,
        error: Exception | None = None,
    ) -> None:
        self.calls: list[dict[str, str]] = []
        self.response = response or UpstreamResponse(
            status_code=200,
            body={"subscription": {"id": 1, "state": "inactive"}},
        )
        self.error = error
        self.closed = False

    async def subscribe(self, *, list_id: str, api_key: str, email: str) -> UpstreamResponse:
        self.calls.append({"list_id": list_id, "api_key": api_key, "email": email})
        if self.error is not None:
            raise self.error
        return self.response

    async def aclose(self) -> None:
        self.closed = True


def build_settings(
    *,
    api_key: str | None = "ck-test-key",
    form_id: str | None = "1234567",
) -> Settings:
    return Settings(
        provider=ProviderSettings(api_key=api_key, form_id=form_id),
        rate_limit=RateLimitSettings(backend="none"),
    )


@pytest.fixture
def fake_provider() -> FakeMailingListClient:
    """Healthy provider stub."""
    return FakeMailingListClient()


@pytest.fixture
def make_client() -> Callable[..., TestClient]:
    """Build a TestClient around a fresh app with injected collaborators.

    Redirects are not followed so form-mode 303s can be asserted directly.
    """

    def _make(
        provider: AbstractMailingListClient | None = None,
        rate_limiter: Any = None,
        settings: Settings | None = None,
    ) -> TestClient:
        app = create_app(
            settings=settings or build_settings(),
            mailing_list_client=provider or FakeMailingListClient(),
            rate_limiter=rate_limiter,
        )
        return TestClient(app, follow_redirects=False)

    return _make
