"""HTTP client for the GridinSoft Inspector API.

Each call is attempted exactly once. Any failure (network error, non-2xx
status, body that is not JSON) surfaces as TransportError.
"""

import logging
from typing import Any

import httpx

from inspector_mcp.errors import TransportError

logger = logging.getLogger(__name__)


class InspectorApiClient:
    """Async JSON client bound to one base URL and one credential."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_s: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: Remote API base URL
            api_key: Optional bearer credential
            timeout_s: Connect/read timeout in seconds
            transport: Optional httpx transport (used by tests to stub the network)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._headers(),
                timeout=self.timeout_s,
                transport=self._transport,
            )
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Make one HTTP request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST)
            path: Path relative to the base URL, query string included
            body: Optional JSON body

        Returns:
            Decoded JSON value

        Raises:
            TransportError: On network failure, non-2xx status or invalid JSON
        """
        client = self._get_client()
        url = f"{self.base_url}{path}"

        logger.debug("API request %s %s", method, path)
        try:
            response = await client.request(method, url, json=body)
        except httpx.HTTPError as e:
            msg = str(e) or type(e).__name__
            raise TransportError(msg) from e

        if not response.is_success:
            text = response.text
            msg = f"API error ({response.status_code}): {text}"
            raise TransportError(msg, status_code=response.status_code, body=text)

        try:
            return response.json()
        except ValueError as e:
            msg = f"Invalid JSON in API response for {path}"
            raise TransportError(msg, status_code=response.status_code) from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "InspectorApiClient":
        """Async context manager entry."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.aclose()
