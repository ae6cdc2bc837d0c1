"""Network clients for journal gateways."""

from .client import Client
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ResponseParseError,
)
from .gateway_client import PING_HEADERS, GatewayClient

__all__ = [
    "Client",
    "GatewayClient",
    "PING_HEADERS",
    "ClientError",
    "ConnectionError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "ResponseParseError",
]
