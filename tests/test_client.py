"""Tests for the base Client class."""

from unittest.mock import MagicMock

import httpx
import pytest

from pln_staging.clients import (
    APIError,
    Client,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)


class TestClientConfiguration:
    """Tests for Client configuration."""

    def test_base_url_defaults_to_empty(self):
        """Gateway URLs are absolute, so base_url is optional."""
        client = Client()

        assert client.base_url == ""

    def test_base_url_from_config(self):
        client = Client({"base_url": "https://journals.example.org"})

        assert client.base_url == "https://journals.example.org"

    def test_default_timeout(self):
        """Client has default timeout of 30 seconds."""
        client = Client()

        assert client.timeout == 30

    def test_custom_timeout(self):
        client = Client({"timeout": 5})

        assert client.timeout == 5

    def test_follows_redirects_by_default(self):
        client = Client()

        assert client.follow_redirects is True

    def test_redirects_can_be_disabled(self):
        client = Client({"follow_redirects": False})

        assert client.follow_redirects is False

    def test_default_headers(self):
        """Client has empty default headers."""
        client = Client()

        assert client.headers == {}

    def test_custom_headers(self):
        headers = {"X-Trace": "abc"}
        client = Client({"headers": headers})

        assert client.headers == headers


class TestClientLifecycle:
    """Tests for Client lifecycle management."""

    def test_lazy_client_initialization(self):
        """httpx.Client is not created until accessed."""
        client = Client()

        assert client._client is None

    def test_client_initialized_on_access(self):
        client = Client()

        _ = client.client

        assert isinstance(client._client, httpx.Client)
        client.close()

    def test_context_manager_closes_client(self):
        """Context manager closes the httpx client on exit."""
        with Client() as client:
            _ = client.client
            assert client._client is not None

        assert client._client is None

    def test_close_when_not_initialized(self):
        client = Client()
        client.close()

        assert client._client is None

    def test_injected_client_is_not_closed(self):
        """A caller-supplied httpx client stays open after close()."""
        http_client = MagicMock(spec=httpx.Client)
        client = Client(http_client=http_client)

        client.close()

        http_client.close.assert_not_called()
        assert client.client is http_client


class TestClientErrorHandling:
    """Tests for Client error handling."""

    def _response(self, status_code: int) -> MagicMock:
        response = MagicMock()
        response.is_success = False
        response.status_code = status_code
        response.url = "https://journals.example.org/test"
        return response

    def test_404_raises_not_found_error(self):
        client = Client()

        with pytest.raises(NotFoundError) as exc_info:
            client._handle_response(self._response(404))

        assert exc_info.value.status_code == 404

    def test_429_raises_rate_limit_error(self):
        client = Client()

        with pytest.raises(RateLimitError) as exc_info:
            client._handle_response(self._response(429))

        assert exc_info.value.status_code == 429

    def test_500_raises_api_error(self):
        """5xx response raises APIError."""
        client = Client()

        with pytest.raises(APIError) as exc_info:
            client._handle_response(self._response(500))

        assert exc_info.value.status_code == 500
        assert "API error 500" in exc_info.value.message

    def test_success_returns_response(self):
        client = Client()
        response = MagicMock()
        response.is_success = True

        assert client._handle_response(response) is response


class TestClientSingleAttempt:
    """Each request is tried exactly once."""

    def test_connection_error_is_not_retried(self):
        client = Client()
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = httpx.ConnectError("Connection refused")
        client._client = mock_http_client

        with pytest.raises(ConnectionError) as exc_info:
            client.get("/test")

        assert "Connection refused" in str(exc_info.value)
        assert mock_http_client.request.call_count == 1

    def test_timeout_raises_connection_error(self):
        client = Client()
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = httpx.ReadTimeout("Request timed out")
        client._client = mock_http_client

        with pytest.raises(ConnectionError, match="Timeout"):
            client.get("/test")

        assert mock_http_client.request.call_count == 1

    def test_api_error_is_not_retried(self):
        client = Client()
        error_response = MagicMock()
        error_response.is_success = False
        error_response.status_code = 400
        error_response.url = "https://journals.example.org/test"
        mock_http_client = MagicMock()
        mock_http_client.request.return_value = error_response
        client._client = mock_http_client

        with pytest.raises(APIError):
            client.get("/test")

        assert mock_http_client.request.call_count == 1

    def test_get_passes_arguments_through(self):
        client = Client()
        response = MagicMock()
        response.is_success = True
        mock_http_client = MagicMock()
        mock_http_client.request.return_value = response
        client._client = mock_http_client

        result = client.get("https://journals.example.org/x", headers={"A": "b"})

        assert result is response
        mock_http_client.request.assert_called_once_with(
            "GET", "https://journals.example.org/x", headers={"A": "b"}
        )

