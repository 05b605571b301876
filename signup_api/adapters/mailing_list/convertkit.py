"""ConvertKit (v3) mailing-list adapter."""

from __future__ import annotations

from typing import Any

import httpx

from signup_api.adapters.mailing_list.base import AbstractMailingListClient
from signup_api.core.errors import UpstreamResponseError, UpstreamTransportError
from signup_api.schemas.subscription import UpstreamResponse


class ConvertKitClient(AbstractMailingListClient):
    """Subscribe emails to a ConvertKit form.

    Uses one shared ``httpx.AsyncClient`` for the process lifetime. No retries:
    every call is exactly one POST.
    """

    def __init__(
        self,
        base_url: str = "https://api.convertkit.com/v3",
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the ConvertKit client.

        Args:
            base_url: API root, without trailing slash.
            timeout_seconds: Optional timeout override; httpx defaults otherwise.
            client: Optional pre-built httpx client (closed by the caller).
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        if client is None:
            client_kwargs: dict[str, Any] = {}
            if timeout_seconds is not None:
                client_kwargs["timeout"] = timeout_seconds
            client = httpx.AsyncClient(**client_kwargs)
        self._client = client

    def subscribe_url(self, list_id: str) -> str:
        return f"{self.base_url}/forms/{list_id}/subscribe"

    async def subscribe(self, *, list_id: str, api_key: str, email: str) -> UpstreamResponse:
        """POST the subscriber to ``/forms/{list_id}/subscribe``.

        ConvertKit v3 takes the API key as a body field, not as an
        Authorization header.
        """
        try:
            response = await self._client.post(
                self.subscribe_url(list_id),
                json={"api_key": api_key, "email": email},
            )
        except httpx.HTTPError as exc:
            raise UpstreamTransportError(
                code="upstream_unreachable",
                message=f"ConvertKit request failed: {type(exc).__name__}",
                details={"error_type": type(exc).__name__},
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamResponseError(
                code="upstream_invalid_body",
                message="ConvertKit returned a non-JSON body",
                details={"http_status": response.status_code},
            ) from exc

        return UpstreamResponse(status_code=response.status_code, body=body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
