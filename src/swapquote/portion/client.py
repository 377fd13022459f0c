"""HTTP client for the remote portion service.

API: GET {base_url}/portion?tokenInChainId=..&tokenInAddress=..&tokenOutChainId=..&tokenOutAddress=..
Response body: {"hasPortion": bool, "portion": {"bips", "recipient", "type"} | null}
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from swapquote.portion.base import GetPortionResponse

logger = logging.getLogger(__name__)


class PortionServiceError(Exception):
    """Raised when the portion service cannot produce a valid response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PortionServiceClient:
    """Portion service client.

    Holds one ``httpx.AsyncClient`` for the lifetime of the instance so
    connections are kept alive between calls.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize portion client.

        Args:
            base_url: Portion service base URL (without the /portion path)
            timeout: Request timeout in seconds (None = httpx default)
            client: Pre-built client, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.portion_url = f"{self.base_url}/portion"
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs = {"timeout": self.timeout} if self.timeout is not None else {}
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def get_portion(
        self,
        token_in_chain_id: int,
        token_in_address: str,
        token_out_chain_id: int,
        token_out_address: str,
    ) -> GetPortionResponse:
        """Fetch the portion for a token pair.

        Raises:
            PortionServiceError: transport failure, non-2xx status or malformed body
        """
        params = {
            "tokenInChainId": token_in_chain_id,
            "tokenInAddress": token_in_address,
            "tokenOutChainId": token_out_chain_id,
            "tokenOutAddress": token_out_address,
        }

        try:
            response = await self._get_client().get(self.portion_url, params=params)
        except httpx.HTTPError as e:
            raise PortionServiceError(f"Portion request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise PortionServiceError(
                f"Portion service returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return GetPortionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise PortionServiceError(f"Malformed portion response: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PortionServiceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
