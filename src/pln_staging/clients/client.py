"""Base client for network requests."""

import logging

import httpx

from .exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


class Client:
    """Base class for network clients.

    Provides lazy-initialized httpx.Client with context manager support,
    configurable timeout, redirects, and headers via dict config. Every
    request is a single attempt; retrying is left to whoever schedules the
    caller.

    Config keys:
        base_url: Base URL for relative request paths (default: none)
        timeout: Request timeout in seconds (default: 30)
        follow_redirects: Whether to follow redirects (default: True)
        headers: Additional headers to include in requests
    """

    def __init__(self, config: dict | None = None, http_client: httpx.Client | None = None):
        self._config = config or {}
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def base_url(self) -> str:
        return str(self._config.get("base_url", ""))

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", 30))

    @property
    def follow_redirects(self) -> bool:
        return bool(self._config.get("follow_redirects", True))

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._config.get("headers", {}))

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=self.follow_redirects,
            )
        return self._client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Map HTTP errors to exceptions.

        Args:
            response: The HTTP response to check

        Returns:
            The response if successful

        Raises:
            NotFoundError: For 404 responses
            RateLimitError: For 429 responses
            APIError: For other non-2xx responses
        """
        if response.is_success:
            return response

        status_code = response.status_code

        if status_code == 404:
            raise NotFoundError(f"Resource not found: {response.url}")
        elif status_code == 429:
            raise RateLimitError(f"Rate limit exceeded: {response.url}")
        else:
            raise APIError(
                f"API error {status_code}: {response.url}",
                status_code=status_code,
            )

    def _request(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> httpx.Response:
        """Make a single request and map failures to client exceptions.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Absolute URL, or a path appended to base_url
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            The HTTP response

        Raises:
            ConnectionError: If the connection fails or times out
            APIError: If the remote end returns a non-2xx response
        """
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout requesting {url}: {e}")
            raise ConnectionError(f"Timeout requesting {url}: {e}") from e
        except httpx.RequestError as e:
            logger.warning(f"Connection error requesting {url}: {e}")
            raise ConnectionError(f"Connection error requesting {url}: {e}") from e

        return self._handle_response(response)

    def get(self, url: str, **kwargs) -> httpx.Response:
        """Convenience method for GET requests.

        Args:
            url: Absolute URL, or a path appended to base_url
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            The HTTP response
        """
        return self._request("GET", url, **kwargs)
