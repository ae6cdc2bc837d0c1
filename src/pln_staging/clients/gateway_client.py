"""Client for the PLN plugin's ping gateway."""

import html
import logging
import re

from schemas.ping_result import PingParseError, PingResult

from .client import Client
from .exceptions import ClientError, NotFoundError, RateLimitError, ResponseParseError

logger = logging.getLogger(__name__)

PING_HEADERS = {
    "User-Agent": "PkpPlnBot 1.0; http://pkp.sfu.ca",
    "Accept": "application/xml,text/xml,*/*;q=0.1",
}


class GatewayClient(Client):
    """Client that pings journal gateways.

    Each ping is exactly one GET with the fixed PLN bot headers, following
    redirects. Failures are not raised: they come back as a failed
    PingResult carrying a tag-stripped message.

    Example:
        with GatewayClient({"timeout": 10}) as client:
            result = client.ping(journal.gateway_url)
            if result.is_success:
                print(result.ojs_release)
    """

    @property
    def headers(self) -> dict[str, str]:
        return {**PING_HEADERS, **self._config.get("headers", {})}

    @property
    def follow_redirects(self) -> bool:
        return True

    def ping(self, url: str) -> PingResult:
        """Ping a gateway URL.

        Args:
            url: Full gateway URL of the journal

        Returns:
            PingResult parsed from the response, or a failed PingResult
            describing the transport, HTTP or parse error
        """
        try:
            return self._ping(url)
        except NotFoundError as e:
            logger.info(f"No PLN gateway at {url}")
            return PingResult.from_error(
                f"PLN gateway plugin not found at {url}. Is the plugin enabled?",
                http_status=e.status_code,
            )
        except RateLimitError as e:
            logger.info(f"Ping of {url} was rate limited")
            return PingResult.from_error(
                f"Journal refused the ping (rate limited): {url}",
                http_status=e.status_code,
            )
        except ClientError as e:
            logger.info(f"Ping of {url} failed: {e.message}")
            return PingResult.from_error(
                self._sanitize(e.message),
                http_status=getattr(e, "status_code", None),
            )

    def _ping(self, url: str) -> PingResult:
        """Request *url* and parse the body, raising ClientError on failure."""
        response = self.get(
            url,
            headers=self.headers,
            follow_redirects=True,
            timeout=self.timeout,
        )
        try:
            return PingResult.from_xml(response.content, http_status=response.status_code)
        except PingParseError as e:
            raise ResponseParseError(str(e), status_code=response.status_code) from e

    def _sanitize(self, message: str) -> str:
        """Strip HTML tags and unescape entities in an error message."""
        stripped = re.sub(r"<[^>]+>", "", message)
        return html.unescape(stripped).strip()
