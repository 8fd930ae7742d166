from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs

import httpx
import pytest

from fantasy_relay.auth.flow import OAuthClientConfig, OAuthTokenClient
from fantasy_relay.core.errors import ExchangeFailed
from fantasy_relay.transport.client import BaseHttpClient

TOKEN_URL = "https://api.login.yahoo.com/oauth2/get_token"
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

CONFIG = OAuthClientConfig(
    client_id="client-id",
    client_secret="client-secret",
    auth_url="https://api.login.yahoo.com/oauth2/request_auth",
    token_url=TOKEN_URL,
    redirect_uri="http://localhost:8000/yahoo/auth/callback",
)


def _client(handler) -> OAuthTokenClient:
    http = BaseHttpClient(base_url=TOKEN_URL, transport=httpx.MockTransport(handler))
    return OAuthTokenClient(http=http, config=CONFIG, _now=lambda: NOW)


def test_exchange_posts_code_with_client_credentials() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "access_token": "tok",
                "refresh_token": "ref",
                "expires_in": 3600,
                "token_type": "bearer",
                "xoauth_yahoo_guid": "GUID42",
            },
        )

    grant = _client(handler).exchange("the-code")

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == TOKEN_URL
    form = parse_qs(request.content.decode())
    assert form == {
        "grant_type": ["authorization_code"],
        "code": ["the-code"],
        "redirect_uri": [CONFIG.redirect_uri],
    }
    expected_auth = base64.b64encode(b"client-id:client-secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected_auth}"

    assert grant.credential.access_token == "tok"
    assert grant.credential.expires_at == NOW + timedelta(hours=1)
    assert grant.yahoo_guid == "GUID42"


def test_exchange_rejection_is_exchange_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant"})

    with pytest.raises(ExchangeFailed):
        _client(handler).exchange("stale")


def test_exchange_network_error_is_exchange_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExchangeFailed):
        _client(handler).exchange("code")


def test_exchange_reply_without_token_is_exchange_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token_type": "bearer"})

    with pytest.raises(ExchangeFailed):
        _client(handler).exchange("code")
