from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime

from fantasy_relay.addressing import catalog
from fantasy_relay.addressing.composer import compose
from fantasy_relay.addressing.resource import ResourceAddress
from fantasy_relay.auth.credentials import CredentialStore, utcnow
from fantasy_relay.core.errors import CredentialRejected, NotAuthenticated
from fantasy_relay.relay.documents import (
    XML_CONTENT_TYPE,
    Document,
    RosterDocument,
    RosterPlayer,
    TradeAction,
    TransactionDocument,
    TransactionPlayer,
    TransactionType,
)
from fantasy_relay.relay.types import HttpVerb, RemoteRequest, RemoteResponse
from fantasy_relay.transport.authenticated import AuthenticatedTransport

logger = logging.getLogger(__name__)

Body = bytes | str | Document

_BODY_REQUIRED = frozenset({HttpVerb.PUT, HttpVerb.POST})


def _encode_body(body: Body | None) -> tuple[bytes | None, str | None]:
    if body is None:
        return None, None
    if isinstance(body, bytes):
        return body, XML_CONTENT_TYPE
    if isinstance(body, str):
        return body.encode("utf-8"), XML_CONTENT_TYPE
    return body.to_xml(), XML_CONTENT_TYPE


class RequestRelay:
    """
    Compose -> authenticate -> send, for one call at a time.

    Holds no per-call state. Domain errors from the remote service come back
    as ordinary RemoteResponses; only transport-level failures, a missing or
    expired credential and credential rejection raise.
    """

    def __init__(
        self,
        *,
        credentials: CredentialStore,
        transport: AuthenticatedTransport,
        query_params: Mapping[str, str] | None = None,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self.credentials = credentials
        self.transport = transport
        self.query_params = dict(query_params or {})
        self.now = now

    def build_request(
        self, address: ResourceAddress, verb: HttpVerb | str, body: Body | None = None
    ) -> RemoteRequest:
        verb = HttpVerb(verb)
        path = compose(address)

        if verb == HttpVerb.GET and body is not None:
            raise ValueError("GET requests do not carry a body")
        if verb in _BODY_REQUIRED and body is None:
            raise ValueError(f"{verb.value} requests require a body document")

        content, content_type = _encode_body(body)
        return RemoteRequest(
            verb=verb,
            path=path,
            body=content,
            content_type=content_type,
            params=dict(self.query_params),
        )

    def execute(
        self,
        session_id: str,
        address: ResourceAddress,
        verb: HttpVerb | str = HttpVerb.GET,
        body: Body | None = None,
        *,
        deadline: float | None = None,
    ) -> RemoteResponse:
        request = self.build_request(address, verb, body)

        credential = self.credentials.get(session_id)
        if credential is None or credential.is_expired(self.now()):
            raise NotAuthenticated("Session has no valid credential; authorize first.")

        try:
            resp = self.transport.send(credential, request, deadline=deadline)
        except CredentialRejected:
            self.credentials.clear(session_id)
            logger.info("Cleared rejected credential for session %s", session_id[:8])
            raise

        logger.info("%s %s -> %s", request.verb.value, request.path, resp.status_code)
        return resp

    def get(
        self, session_id: str, address: ResourceAddress, *, deadline: float | None = None
    ) -> RemoteResponse:
        return self.execute(session_id, address, HttpVerb.GET, deadline=deadline)

    # -----------------------------
    # Transaction resource (PUT / DELETE)
    # -----------------------------

    def edit_waiver(
        self,
        session_id: str,
        transaction_key: str,
        *,
        waiver_priority: int | None = None,
        faab_bid: int | None = None,
    ) -> RemoteResponse:
        if waiver_priority is None and faab_bid is None:
            raise ValueError("Pass waiver_priority and/or faab_bid")
        doc = TransactionDocument(
            type=TransactionType.WAIVER,
            transaction_key=transaction_key,
            waiver_priority=waiver_priority,
            faab_bid=faab_bid,
        )
        return self.execute(session_id, catalog.transaction(transaction_key), HttpVerb.PUT, doc)

    def _trade_action(
        self,
        session_id: str,
        transaction_key: str,
        action: TradeAction,
        *,
        trade_note: str | None = None,
        voter_team_key: str | None = None,
    ) -> RemoteResponse:
        doc = TransactionDocument(
            type=TransactionType.PENDING_TRADE,
            transaction_key=transaction_key,
            action=action,
            trade_note=trade_note,
            voter_team_key=voter_team_key,
        )
        return self.execute(session_id, catalog.transaction(transaction_key), HttpVerb.PUT, doc)

    def accept_trade(
        self, session_id: str, transaction_key: str, *, trade_note: str | None = None
    ) -> RemoteResponse:
        return self._trade_action(
            session_id, transaction_key, TradeAction.ACCEPT, trade_note=trade_note
        )

    def reject_trade(
        self, session_id: str, transaction_key: str, *, trade_note: str | None = None
    ) -> RemoteResponse:
        return self._trade_action(
            session_id, transaction_key, TradeAction.REJECT, trade_note=trade_note
        )

    def allow_trade(self, session_id: str, transaction_key: str) -> RemoteResponse:
        return self._trade_action(session_id, transaction_key, TradeAction.ALLOW)

    def disallow_trade(self, session_id: str, transaction_key: str) -> RemoteResponse:
        return self._trade_action(session_id, transaction_key, TradeAction.DISALLOW)

    def vote_against_trade(
        self, session_id: str, transaction_key: str, *, voter_team_key: str
    ) -> RemoteResponse:
        return self._trade_action(
            session_id, transaction_key, TradeAction.VOTE_AGAINST, voter_team_key=voter_team_key
        )

    def cancel_transaction(self, session_id: str, transaction_key: str) -> RemoteResponse:
        """Cancel a pending waiver claim or a not-yet-accepted trade proposal."""

        return self.execute(session_id, catalog.transaction(transaction_key), HttpVerb.DELETE)

    # -----------------------------
    # Transactions collection (POST)
    # -----------------------------

    def add_player(
        self,
        session_id: str,
        league_key: str,
        *,
        player_key: str,
        team_key: str,
        faab_bid: int | None = None,
    ) -> RemoteResponse:
        doc = TransactionDocument(
            type=TransactionType.ADD,
            faab_bid=faab_bid,
            players=(
                TransactionPlayer(
                    player_key, TransactionType.ADD, destination_team_key=team_key
                ),
            ),
        )
        return self._post_transaction(session_id, league_key, doc)

    def drop_player(
        self, session_id: str, league_key: str, *, player_key: str, team_key: str
    ) -> RemoteResponse:
        dropped = TransactionPlayer(player_key, TransactionType.DROP, source_team_key=team_key)
        doc = TransactionDocument(type=TransactionType.DROP, players=(dropped,))
        return self._post_transaction(session_id, league_key, doc)

    def add_drop(
        self,
        session_id: str,
        league_key: str,
        *,
        add_player_key: str,
        drop_player_key: str,
        team_key: str,
        faab_bid: int | None = None,
    ) -> RemoteResponse:
        doc = TransactionDocument(
            type=TransactionType.ADD_DROP,
            faab_bid=faab_bid,
            players=(
                TransactionPlayer(
                    add_player_key, TransactionType.ADD, destination_team_key=team_key
                ),
                TransactionPlayer(
                    drop_player_key, TransactionType.DROP, source_team_key=team_key
                ),
            ),
        )
        return self._post_transaction(session_id, league_key, doc)

    def propose_trade(
        self,
        session_id: str,
        league_key: str,
        *,
        trader_team_key: str,
        tradee_team_key: str,
        trader_player_keys: Sequence[str],
        tradee_player_keys: Sequence[str],
        trade_note: str | None = None,
    ) -> RemoteResponse:
        players = [
            TransactionPlayer(
                key,
                TransactionType.PENDING_TRADE,
                source_team_key=trader_team_key,
                destination_team_key=tradee_team_key,
            )
            for key in trader_player_keys
        ] + [
            TransactionPlayer(
                key,
                TransactionType.PENDING_TRADE,
                source_team_key=tradee_team_key,
                destination_team_key=trader_team_key,
            )
            for key in tradee_player_keys
        ]
        doc = TransactionDocument(
            type=TransactionType.PENDING_TRADE,
            trader_team_key=trader_team_key,
            tradee_team_key=tradee_team_key,
            trade_note=trade_note,
            players=tuple(players),
        )
        return self._post_transaction(session_id, league_key, doc)

    def _post_transaction(
        self, session_id: str, league_key: str, doc: TransactionDocument
    ) -> RemoteResponse:
        target = catalog.league_transactions_target(league_key)
        return self.execute(session_id, target, HttpVerb.POST, doc)

    # -----------------------------
    # Roster resource (PUT)
    # -----------------------------

    def edit_roster(
        self,
        session_id: str,
        team_key: str,
        positions: Mapping[str, str],
        *,
        week: int | None = None,
        date: str | None = None,
    ) -> RemoteResponse:
        """Move players (player_key -> position) for one week or date."""

        doc = RosterDocument(
            players=tuple(RosterPlayer(k, pos) for k, pos in positions.items()),
            week=week,
            date=date,
        )
        return self.execute(session_id, catalog.team(team_key, "roster"), HttpVerb.PUT, doc)
