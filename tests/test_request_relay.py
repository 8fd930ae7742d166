from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from fantasy_relay.addressing import catalog
from fantasy_relay.addressing.resource import ResourceAddress
from fantasy_relay.auth.credentials import Credential, InMemoryCredentialStore
from fantasy_relay.core.errors import (
    Cancelled,
    CredentialRejected,
    DecodeDeferred,
    InvalidChaining,
    NotAuthenticated,
    TransportError,
)
from fantasy_relay.relay.relay import RequestRelay
from fantasy_relay.relay.types import HttpVerb
from fantasy_relay.transport.authenticated import AuthenticatedTransport
from fantasy_relay.transport.client import BaseHttpClient

BASE_URL = "https://fantasysports.yahooapis.com/fantasy/v2"
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

ROSTER_XML = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b"<fantasy_content><team><team_key>223.l.431.t.1</team_key>"
    b"<roster><week>10</week></roster></team></fantasy_content>"
)


class Recorder:
    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response or httpx.Response(
            200, content=ROSTER_XML, headers={"Content-Type": "application/xml"}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def _relay(
    recorder: Recorder,
    *,
    credential: Credential | None = None,
    query_params: dict[str, str] | None = None,
    monotonic=None,
) -> tuple[RequestRelay, InMemoryCredentialStore]:
    credentials = InMemoryCredentialStore()
    if credential is not None:
        credentials.put("s1", credential)
    kwargs = {"_monotonic": monotonic} if monotonic is not None else {}
    http = BaseHttpClient(base_url=BASE_URL, transport=httpx.MockTransport(recorder), **kwargs)
    relay = RequestRelay(
        credentials=credentials,
        transport=AuthenticatedTransport(http=http),
        query_params=query_params,
        now=lambda: NOW,
    )
    return relay, credentials


def _valid() -> Credential:
    return Credential(access_token="tok", expires_at=NOW + timedelta(hours=1))


def test_get_team_roster_end_to_end() -> None:
    recorder = Recorder()
    relay, _ = _relay(recorder, credential=_valid())

    resp = relay.get("s1", catalog.team_roster("223.l.431.t.1", week=10))

    assert len(recorder.requests) == 1
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/fantasy/v2/team/223.l.431.t.1/roster;week=10"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.content == b""

    assert resp.status_code == 200
    assert resp.content == ROSTER_XML
    assert resp.content_type == "application/xml"


def test_response_format_query_param() -> None:
    recorder = Recorder(httpx.Response(200, json={"fantasy_content": {}}))
    relay, _ = _relay(recorder, credential=_valid(), query_params={"format": "json"})

    resp = relay.get("s1", catalog.user_games())

    assert recorder.requests[0].url.path == "/fantasy/v2/users;use_login=1/games"
    assert recorder.requests[0].url.params["format"] == "json"
    assert resp.json() == {"fantasy_content": {}}


def test_non_json_body_defers_decoding() -> None:
    relay, _ = _relay(Recorder(), credential=_valid())

    resp = relay.get("s1", catalog.league_standings("223.l.431"))
    with pytest.raises(DecodeDeferred):
        resp.json()


def test_missing_credential_makes_no_network_call() -> None:
    recorder = Recorder()
    relay, _ = _relay(recorder)

    with pytest.raises(NotAuthenticated):
        relay.get("s1", catalog.league_standings("223.l.431"))
    assert recorder.requests == []


def test_expired_credential_makes_no_network_call() -> None:
    recorder = Recorder()
    expired = Credential(access_token="tok", expires_at=NOW - timedelta(seconds=1))
    relay, _ = _relay(recorder, credential=expired)

    with pytest.raises(NotAuthenticated):
        relay.get("s1", catalog.league_standings("223.l.431"))
    assert recorder.requests == []


def test_invalid_address_fails_before_credential_lookup() -> None:
    recorder = Recorder()
    relay, _ = _relay(recorder)
    address = ResourceAddress(
        "team", keys="223.l.431.t.1", out=[ResourceAddress("roster", chain=["players"])]
    )

    with pytest.raises(InvalidChaining):
        relay.get("s1", address)
    assert recorder.requests == []


def test_rejected_credential_is_cleared() -> None:
    recorder = Recorder(httpx.Response(401, content=b"token_expired"))
    relay, credentials = _relay(recorder, credential=_valid())

    with pytest.raises(CredentialRejected):
        relay.get("s1", catalog.user_games())

    assert credentials.get("s1") is None
    assert len(recorder.requests) == 1


def test_remote_domain_errors_pass_through() -> None:
    body = b"<error><description>Invalid week</description></error>"
    recorder = Recorder(httpx.Response(400, content=body))
    relay, credentials = _relay(recorder, credential=_valid())

    resp = relay.get("s1", catalog.league_scoreboard("223.l.431", week=99))

    assert resp.status_code == 400
    assert resp.content == body
    assert credentials.get("s1") is not None


def test_transport_failure_is_not_retried() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection reset", request=request)

    credentials = InMemoryCredentialStore()
    credentials.put("s1", _valid())
    http = BaseHttpClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    relay = RequestRelay(
        credentials=credentials, transport=AuthenticatedTransport(http=http), now=lambda: NOW
    )

    with pytest.raises(TransportError):
        relay.get("s1", catalog.user_games())
    assert len(calls) == 1


def test_passed_deadline_is_cancelled() -> None:
    recorder = Recorder()
    relay, _ = _relay(recorder, credential=_valid(), monotonic=lambda: 50.0)

    with pytest.raises(Cancelled):
        relay.get("s1", catalog.user_games(), deadline=49.0)
    assert recorder.requests == []


def test_body_rules_per_verb() -> None:
    relay, _ = _relay(Recorder(), credential=_valid())
    address = catalog.transaction("257.l.193.w.c.2_6390")

    with pytest.raises(ValueError):
        relay.execute("s1", address, HttpVerb.GET, b"<x/>")
    with pytest.raises(ValueError):
        relay.execute("s1", address, HttpVerb.PUT)


def test_raw_body_is_sent_unmodified() -> None:
    recorder = Recorder(httpx.Response(200, content=b"<ok/>"))
    relay, _ = _relay(recorder, credential=_valid())
    body = b"<fantasy_content><transaction><faab_bid>7</faab_bid></transaction></fantasy_content>"

    relay.execute("s1", catalog.transaction("257.l.193.w.c.2_6390"), "PUT", body)

    request = recorder.requests[0]
    assert request.method == "PUT"
    assert request.content == body
    assert request.headers["Content-Type"] == "application/xml"


def test_edit_waiver_sends_only_given_fields() -> None:
    recorder = Recorder(httpx.Response(200, content=b"<ok/>"))
    relay, _ = _relay(recorder, credential=_valid())

    relay.edit_waiver("s1", "257.l.193.w.c.2_6390", faab_bid=20)

    request = recorder.requests[0]
    assert request.method == "PUT"
    assert request.url.path == "/fantasy/v2/transaction/257.l.193.w.c.2_6390"
    tx = ET.fromstring(request.content).find("transaction")
    assert [child.tag for child in tx] == ["transaction_key", "type", "faab_bid"]
    assert tx.findtext("type") == "waiver"
    assert tx.findtext("faab_bid") == "20"

    with pytest.raises(ValueError):
        relay.edit_waiver("s1", "257.l.193.w.c.2_6390")


def test_add_drop_posts_to_league_transactions() -> None:
    recorder = Recorder(httpx.Response(201, content=b"<ok/>"))
    relay, _ = _relay(recorder, credential=_valid())

    resp = relay.add_drop(
        "s1",
        "257.l.193",
        add_player_key="257.p.7847",
        drop_player_key="257.p.6390",
        team_key="257.l.193.t.1",
    )

    assert resp.status_code == 201
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/fantasy/v2/league/257.l.193/transactions"
    tx = ET.fromstring(request.content).find("transaction")
    assert tx.findtext("type") == "add/drop"
    players = tx.findall("players/player")
    assert [p.findtext("player_key") for p in players] == ["257.p.7847", "257.p.6390"]
    assert players[0].findtext("transaction_data/destination_team_key") == "257.l.193.t.1"
    assert players[1].findtext("transaction_data/source_team_key") == "257.l.193.t.1"


def test_cancel_transaction_is_a_delete_without_body() -> None:
    recorder = Recorder(httpx.Response(200, content=b""))
    relay, _ = _relay(recorder, credential=_valid())

    relay.cancel_transaction("s1", "257.l.193.pt.1")

    request = recorder.requests[0]
    assert request.method == "DELETE"
    assert request.url.path == "/fantasy/v2/transaction/257.l.193.pt.1"
    assert request.content == b""
    assert "Content-Type" not in request.headers


def test_edit_roster_puts_lineup() -> None:
    recorder = Recorder(httpx.Response(200, content=b"<ok/>"))
    relay, _ = _relay(recorder, credential=_valid())

    relay.edit_roster("s1", "253.l.102614.t.10", {"253.p.8332": "1B"}, date="2011-05-04")

    request = recorder.requests[0]
    assert request.method == "PUT"
    assert request.url.path == "/fantasy/v2/team/253.l.102614.t.10/roster"
    roster = ET.fromstring(request.content).find("roster")
    assert roster.findtext("coverage_type") == "date"
    assert roster.findtext("date") == "2011-05-04"
    assert roster.findtext("players/player/position") == "1B"
