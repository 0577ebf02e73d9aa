import json

import pytest
import requests
from prometheus_client import REGISTRY

from fastchannel.client import (
    ApiRequestError,
    AuthenticationError,
    FastchannelHTTPClient,
    NotAuthenticatedError,
)
from fastchannel.config import Settings

BASE_URL = "https://api.commerce.example/"
TOKEN_URL = "https://login.example/token"


class _DummyResp:
    def __init__(self, status_code=200, text="", json_data=None):
        self.status_code = status_code
        self.text = json.dumps(json_data) if json_data is not None else text
        self.headers = {}
        self.ok = 200 <= status_code < 300

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(response=self)


@pytest.fixture
def calls(monkeypatch):
    """Record every request; token POSTs get a token, API calls echo their body."""
    recorded = []

    def fake_request(self, method, url, **kwargs):
        recorded.append({"method": method, "url": url, **kwargs})
        if url == TOKEN_URL:
            return _DummyResp(json_data={"access_token": "BEARER_TOKEN", "expires_in": 3599})
        data = kwargs.get("data")
        return _DummyResp(text=data.decode("utf-8") if data else '{"ok":true}')

    monkeypatch.setattr(requests.Session, "request", fake_request, raising=True)
    return recorded


@pytest.fixture
def client(calls):
    http = FastchannelHTTPClient(BASE_URL, "SUBKEY")
    http.authenticate(TOKEN_URL, "cid", "secret", "api://app/.default")
    return http


def test_authenticate_stores_token(client, calls):
    assert client.authenticated
    assert client.access_token == "BEARER_TOKEN"
    assert calls[0]["method"] == "POST"
    assert calls[0]["data"]["grant_type"] == "client_credentials"


def test_get_sends_auth_and_subscription_headers(client, calls):
    body = client.get("stock-management/v1/stock/32004210")

    assert body == '{"ok":true}'
    call = calls[-1]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.commerce.example/stock-management/v1/stock/32004210"
    assert call["headers"] == {
        "Authorization": "Bearer BEARER_TOKEN",
        "Subscription-Key": "SUBKEY",
        "Accept": "application/json",
    }
    assert call["data"] is None


def test_put_round_trips_body_with_json_content_type(client, calls):
    payload = '{"StorageId":18,"Quantity":0}'
    body = client.put("stock-management/v1/stock/32004210", payload)

    assert body == payload
    call = calls[-1]
    assert call["method"] == "PUT"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["data"] == payload.encode("utf-8")


@pytest.mark.parametrize(
    "verb, has_body",
    [("post", True), ("patch", True), ("delete", False)],
)
def test_verb_shortcuts(client, calls, verb, has_body):
    fn = getattr(client, verb)
    if has_body:
        fn("things/1", '{"a":1}')
    else:
        fn("things/1")
    assert calls[-1]["method"] == verb.upper()
    assert ("Content-Type" in calls[-1]["headers"]) is has_body


def test_request_normalises_method_and_slashes(client, calls):
    client.request("get", "/stock-management/v1/stock/1")
    assert calls[-1]["method"] == "GET"
    assert calls[-1]["url"] == "https://api.commerce.example/stock-management/v1/stock/1"


def test_body_is_utf8_encoded(client, calls):
    client.post("notes", '{"text":"nº"}')
    assert calls[-1]["data"] == '{"text":"nº"}'.encode("utf-8")


def test_unsupported_method_rejected(client, calls):
    count = len(calls)
    with pytest.raises(ValueError):
        client.request("TRACE", "x")
    assert len(calls) == count


def test_call_before_authenticate_raises(calls):
    http = FastchannelHTTPClient(BASE_URL, "SUBKEY")
    with pytest.raises(NotAuthenticatedError):
        http.get("stock-management/v1/stock/1")
    assert calls == []


def test_failed_authentication_leaves_client_unauthenticated(monkeypatch):
    monkeypatch.setattr(
        requests.Session,
        "request",
        lambda self, method, url, **kw: _DummyResp(status_code=400, json_data={"error": "invalid_scope"}),
    )
    http = FastchannelHTTPClient(BASE_URL, "SUBKEY")
    with pytest.raises(AuthenticationError):
        http.authenticate(TOKEN_URL, "cid", "secret", "bad")
    assert not http.authenticated


def test_non_2xx_raises_api_request_error(client, monkeypatch):
    monkeypatch.setattr(
        requests.Session,
        "request",
        lambda self, method, url, **kw: _DummyResp(status_code=404, text='{"message":"not found"}'),
    )
    with pytest.raises(ApiRequestError) as info:
        client.get("stock-management/v1/stock/00000000")
    err = info.value
    assert err.status_code == 404
    assert err.method == "GET"
    assert err.body == '{"message":"not found"}'
    assert err.url.endswith("/stock-management/v1/stock/00000000")


def test_transport_error_raises_api_request_error(client, monkeypatch):
    def boom(self, method, url, **kw):
        raise requests.Timeout("slow")

    monkeypatch.setattr(requests.Session, "request", boom)
    with pytest.raises(ApiRequestError) as info:
        client.get("x")
    assert info.value.status_code is None
    assert isinstance(info.value.__cause__, requests.Timeout)


def test_failure_is_logged_with_traceback(client, monkeypatch, caplog):
    monkeypatch.setattr(
        requests.Session,
        "request",
        lambda self, method, url, **kw: _DummyResp(status_code=500, text="oops"),
    )
    with caplog.at_level("ERROR", logger="fastchannel.client"):
        with pytest.raises(ApiRequestError):
            client.put("x", "{}")
    record = caplog.records[-1]
    assert "HTTP 500" in record.getMessage()
    assert record.exc_info is not None
    assert "BEARER_TOKEN" not in caplog.text


def test_request_metrics_increment(client, calls):
    labels = {"method": "GET", "status": "200"}
    before = REGISTRY.get_sample_value("fastchannel_http_requests_total", labels) or 0.0
    client.get("x")
    client.get("y")
    assert REGISTRY.get_sample_value("fastchannel_http_requests_total", labels) == before + 2


def test_from_settings_and_context_manager(calls):
    settings = Settings(
        client_id="cid",
        client_secret="s",
        subscription_key="KEY",
        base_url="https://api.other/",
        timeout=5,
    )
    with FastchannelHTTPClient.from_settings(settings) as http:
        http.authenticate(TOKEN_URL, settings.client_id, settings.client_secret, settings.scope)
        http.get("ping")
    assert calls[-1]["url"] == "https://api.other/ping"
    assert calls[-1]["timeout"] == 5
    assert calls[-1]["headers"]["Subscription-Key"] == "KEY"


@pytest.fixture
def closed(monkeypatch):
    recorded = []
    monkeypatch.setattr(requests.Session, "close", lambda self: recorded.append(self))
    return recorded


def test_exit_closes_owned_session(calls, closed):
    with FastchannelHTTPClient(BASE_URL, "SUBKEY") as http:
        http.authenticate(TOKEN_URL, "cid", "secret", "api://app/.default")
        http.get("ping")
    assert closed == [http.session]


def test_close_closes_owned_session(closed):
    http = FastchannelHTTPClient(BASE_URL, "SUBKEY")
    http.close()
    assert closed == [http.session]


def test_injected_session_left_open(calls, closed):
    session = requests.Session()
    with FastchannelHTTPClient(BASE_URL, "SUBKEY", session=session) as http:
        http.authenticate(TOKEN_URL, "cid", "secret", "api://app/.default")
        http.get("ping")
    http.close()
    assert closed == []
    assert http.session is session
