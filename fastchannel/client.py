# fastchannel/client.py
"""Blocking client for the Fastchannel commerce REST API.

- OAuth2 client-credentials grant against the Microsoft identity endpoint.
- One bearer token per client instance, fetched by ``authenticate`` and
  reused verbatim on every call (no expiry tracking, no refresh).
- Generic ``request`` returning the response body as text; bodies are opaque
  JSON strings composed and interpreted by the caller.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

import requests

from . import metrics
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_SCOPE,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_URL,
    Settings,
)

__all__ = [
    "HTTP_METHODS",
    "FastchannelError",
    "AuthenticationError",
    "NotAuthenticatedError",
    "ApiRequestError",
    "ClientCredentialsTokenProvider",
    "FastchannelHTTPClient",
    "extract_access_token",
    "fetch_token",
]

_log = logging.getLogger(__name__)

HTTP_METHODS = frozenset(["GET", "POST", "PUT", "PATCH", "DELETE"])


# --- Errors -------------------------------------------------------------------
class FastchannelError(Exception):
    """Base class for every error raised by this package."""


class AuthenticationError(FastchannelError):
    """The client-credentials grant failed or returned no usable token."""


class NotAuthenticatedError(FastchannelError):
    """An API call was attempted before ``authenticate`` succeeded."""


class ApiRequestError(FastchannelError):
    """An API call failed on the wire or returned a non-2xx status."""

    def __init__(
        self,
        method: str,
        url: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        if status_code is None:
            msg = f"{method} {url} failed"
        else:
            msg = f"{method} {url} returned HTTP {status_code}"
        super().__init__(msg)


# --- Token --------------------------------------------------------------------
def _token_payload(text: str) -> Dict[str, Any]:
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise AuthenticationError("Token response is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise AuthenticationError("Token response is not a JSON object")
    return payload


def extract_access_token(text: str) -> str:
    """Return the ``access_token`` string from a raw token-response body."""
    token = _token_payload(text).get("access_token")
    if not isinstance(token, str) or not token:
        raise AuthenticationError("Token response missing 'access_token'")
    return token


class ClientCredentialsTokenProvider:
    """
    OAuth2 client-credentials grant (machine-to-machine).

    ``fetch`` always performs the grant; callers keep the returned token.
    ``expires_in`` from the last response is kept for diagnostics only.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        scope: str = DEFAULT_SCOPE,
        token_url: str = DEFAULT_TOKEN_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool | str = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not token_url:
            raise ValueError("token_url is required")
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self.token_url = token_url
        self.timeout = timeout
        self.verify = verify
        self.session = session or requests.Session()
        self.expires_in: Optional[int] = None

    def _form(self) -> Dict[str, str]:
        return {
            "grant_type": "client_credentials",
            "scope": self.scope,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }

    def fetch(self) -> str:
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        try:
            resp = self.session.post(
                self.token_url,
                headers=headers,
                data=self._form(),
                timeout=self.timeout,
                verify=self.verify,
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            metrics.oauth_errors_total.labels(reason="http_status").inc()
            status = getattr(exc.response, "status_code", None)
            raise AuthenticationError(
                f"Token endpoint {self.token_url} returned HTTP {status}"
            ) from exc
        except requests.RequestException as exc:
            metrics.oauth_errors_total.labels(reason="transport").inc()
            raise AuthenticationError(
                f"Token endpoint {self.token_url} unreachable"
            ) from exc

        try:
            token = extract_access_token(resp.text)
        except AuthenticationError:
            metrics.oauth_errors_total.labels(reason="payload").inc()
            raise

        try:
            self.expires_in = int(_token_payload(resp.text).get("expires_in"))
        except (TypeError, ValueError):
            self.expires_in = None
        metrics.oauth_tokens_issued_total.inc()
        _log.debug(
            "Issued client_credentials token; scope=%s expires_in=%s",
            self.scope,
            self.expires_in,
        )
        return token


def fetch_token(
    client_id: str,
    client_secret: str,
    scope: str = DEFAULT_SCOPE,
    token_url: str = DEFAULT_TOKEN_URL,
    verify: bool | str = True,
) -> str:
    with requests.Session() as session:
        return ClientCredentialsTokenProvider(
            client_id=client_id,
            client_secret=client_secret,
            scope=scope,
            token_url=token_url,
            verify=verify,
            session=session,
        ).fetch()


# --- Client -------------------------------------------------------------------
class FastchannelHTTPClient:
    """
    One instance can make many authenticated requests.

    Authenticate once, then reuse the same access token on every call::

        with FastchannelHTTPClient(base_url, subscription_key) as http:
            http.authenticate(token_url, client_id, client_secret, scope)
            body = http.get("stock-management/v1/stock/32004210")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        subscription_key: str = "",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool | str = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.subscription_key = subscription_key
        self.timeout = timeout
        self.verify = verify
        self._own_session = session is None
        self.session = session or requests.Session()
        self.access_token: Optional[str] = None

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[requests.Session] = None
    ) -> "FastchannelHTTPClient":
        return cls(
            settings.base_url,
            settings.subscription_key,
            timeout=settings.timeout,
            session=session,
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.access_token)

    def authenticate(
        self,
        token_endpoint: str,
        client_id: str,
        client_secret: str,
        client_scope: str,
    ) -> str:
        """Run the client-credentials grant and keep the token for later calls."""
        provider = ClientCredentialsTokenProvider(
            client_id=client_id,
            client_secret=client_secret,
            scope=client_scope,
            token_url=token_endpoint,
            timeout=self.timeout,
            verify=self.verify,
            session=self.session,
        )
        self.access_token = provider.fetch()
        _log.info("Authenticated against %s", token_endpoint)
        return self.access_token

    # --- headers/url builders -------------------------------------------------
    def _url(self, resource_path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{resource_path.lstrip('/')}"

    def _headers(self, has_body: bool) -> Dict[str, str]:
        h = {
            "Authorization": f"Bearer {self.access_token}",
            "Subscription-Key": self.subscription_key,
            "Accept": "application/json",
        }
        if has_body:
            h["Content-Type"] = "application/json"
        return h

    # --- core request ---------------------------------------------------------
    def request(self, method: str, resource_path: str, body: Optional[str] = None) -> str:
        """Send an authenticated request and return the response body as text.

        Raises ``ValueError`` for an unsupported verb, ``NotAuthenticatedError``
        before ``authenticate`` has succeeded and ``ApiRequestError`` on I/O
        failure or a non-2xx status.
        """
        verb = method.upper()
        if verb not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        if not self.access_token:
            raise NotAuthenticatedError("authenticate() must succeed before API calls")

        url = self._url(resource_path)
        data = body.encode("utf-8") if body is not None else None
        extra = {"method": verb, "endpoint": resource_path}
        start = time.perf_counter()
        status = "ERR"
        try:
            resp = self.session.request(
                verb,
                url,
                headers=self._headers(body is not None),
                data=data,
                timeout=self.timeout,
                verify=self.verify,
            )
            status = str(resp.status_code)
            resp.raise_for_status()
        except requests.HTTPError as exc:
            _log.exception("%s %s failed with HTTP %s", verb, url, status,
                           extra={**extra, "status_code": resp.status_code})
            raise ApiRequestError(verb, url, resp.status_code, resp.text) from exc
        except requests.RequestException as exc:
            _log.exception("%s %s failed", verb, url, extra=extra)
            raise ApiRequestError(verb, url) from exc
        finally:
            metrics.http_requests_total.labels(method=verb, status=status).inc()
            metrics.http_latency_seconds.labels(method=verb).observe(
                time.perf_counter() - start
            )

        _log.debug("%s %s -> %s", verb, url, status, extra={**extra, "status_code": resp.status_code})
        return resp.text

    def get(self, resource_path: str) -> str:
        return self.request("GET", resource_path)

    def post(self, resource_path: str, request_body: str) -> str:
        return self.request("POST", resource_path, request_body)

    def put(self, resource_path: str, request_body: str) -> str:
        return self.request("PUT", resource_path, request_body)

    def patch(self, resource_path: str, request_body: str) -> str:
        return self.request("PATCH", resource_path, request_body)

    def delete(self, resource_path: str) -> str:
        return self.request("DELETE", resource_path)

    def close(self) -> None:
        if self._own_session:
            self.session.close()

    # context-manager sugar
    def __enter__(self) -> "FastchannelHTTPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
