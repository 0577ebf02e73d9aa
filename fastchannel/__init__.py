"""Fastchannel commerce API client.

Acquire an OAuth2 client-credentials token, then issue authenticated REST
calls against the commerce API.
"""

from .client import (
    ApiRequestError,
    AuthenticationError,
    ClientCredentialsTokenProvider,
    FastchannelError,
    FastchannelHTTPClient,
    NotAuthenticatedError,
    extract_access_token,
    fetch_token,
)
from .config import Settings
from .stock import StockClient

__all__ = [
    "ApiRequestError",
    "AuthenticationError",
    "ClientCredentialsTokenProvider",
    "FastchannelError",
    "FastchannelHTTPClient",
    "NotAuthenticatedError",
    "Settings",
    "StockClient",
    "extract_access_token",
    "fetch_token",
]
