from abc import ABC, abstractmethod

from signup_api.schemas.subscription import UpstreamResponse


class AbstractMailingListClient(ABC):
    """Interface for the mailing-list provider that owns subscriber records."""

    @abstractmethod
    async def subscribe(self, *, list_id: str, api_key: str, email: str) -> UpstreamResponse:
        """Add ``email`` to the provider list in a single request.

        Args:
            list_id: Provider list/form identifier (numeric).
            api_key: Provider credential.
            email: Normalized subscriber email.

        Returns:
            UpstreamResponse: Status code and decoded JSON body, unjudged.
                Callers decide whether it is a success.

        Raises:
            UpstreamTransportError: If the provider could not be reached.
            UpstreamResponseError: If the provider body is not JSON.
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        return None
