"""Base async HTTP client and the API error types."""

from typing import Any

import httpx


class APIError(Exception):
    """Raised when a remote API call fails."""
    pass


class TransportError(APIError):
    """Raised when the endpoint could not be reached or answered garbage."""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteError(APIError):
    """Raised when the endpoint answered with a JSON-RPC error object."""
    def __init__(self, message: str, code: int | None = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class BaseAPIClient:
    """Base class for async API clients. No retries: one request, one answer."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._get_default_headers(),
            )
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Override in subclass to add default headers."""
        return {
            "Accept": "application/json",
            "User-Agent": "SolanaWalletLookup/0.1.0",
        }

    def _handle_response(self, response: httpx.Response) -> Any:
        """Decode the response body as JSON."""
        try:
            return response.json()
        except ValueError:
            if response.status_code >= 400:
                raise TransportError(
                    response.text or f"HTTP {response.status_code}",
                    response.status_code,
                )
            raise TransportError(
                f"Malformed response body from {self.base_url}",
                response.status_code,
            )

    async def post(self, json_data: Any) -> Any:
        """POST a JSON body to the base URL and return the decoded reply."""
        try:
            response = await self.client.post(self.base_url, json=json_data)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}") from e

        return self._handle_response(response)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
