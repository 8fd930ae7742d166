from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

import httpx

from fantasy_relay.auth.credentials import Credential, CredentialStore, utcnow
from fantasy_relay.auth.sessions import AuthPhase, Session, SessionStore
from fantasy_relay.core.errors import ExchangeFailed, StateMismatch, TransportError
from fantasy_relay.transport.client import BaseHttpClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthClientConfig:
    client_id: str
    client_secret: str
    auth_url: str
    token_url: str
    redirect_uri: str
    scopes: Sequence[str] = ()


@dataclass(frozen=True)
class TokenGrant:
    credential: Credential
    yahoo_guid: str | None = None


class TokenExchanger(Protocol):
    def exchange(self, code: str) -> TokenGrant: ...


@dataclass
class OAuthTokenClient:
    """Server-to-server authorization-code exchange against the token endpoint."""

    http: BaseHttpClient
    config: OAuthClientConfig
    _now: Callable[[], datetime] = field(default=utcnow, repr=False)

    def exchange(self, code: str) -> TokenGrant:
        try:
            payload = self.http.request_json(
                "POST",
                self.config.token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.config.redirect_uri,
                },
                auth=httpx.BasicAuth(self.config.client_id, self.config.client_secret),
            )
        except TransportError as e:
            raise ExchangeFailed(f"Token exchange failed: {e}") from e

        try:
            credential = Credential.from_token_response(payload, now=self._now())
        except ValueError as e:
            raise ExchangeFailed(f"Token endpoint returned an unusable reply: {e}") from e

        guid = payload.get("xoauth_yahoo_guid")
        if not isinstance(guid, str):
            guid = None
        return TokenGrant(credential=credential, yahoo_guid=guid)


class AuthorizationFlow:
    """
    Three-legged handshake: Unauthenticated -> PendingConsent -> Authenticated.

    A `state` value is single use. It is consumed before the code exchange, so
    after an ExchangeFailed the session stays in PendingConsent but only a fresh
    `begin` can produce a callback that passes the check again.
    """

    def __init__(
        self,
        *,
        config: OAuthClientConfig,
        sessions: SessionStore,
        credentials: CredentialStore,
        exchanger: TokenExchanger,
        make_state: Callable[[], str] = lambda: secrets.token_urlsafe(32),
    ) -> None:
        self.config = config
        self.sessions = sessions
        self.credentials = credentials
        self.exchanger = exchanger
        self.make_state = make_state

    def consent_url(self, state: str) -> str:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "state": state,
        }
        if self.config.scopes:
            params["scope"] = " ".join(self.config.scopes)
        return str(httpx.URL(self.config.auth_url, params=params))

    def begin(self, session: Session) -> str:
        """Store a fresh anti-forgery state on the session and return the consent URL."""

        session.state = self.make_state()
        session.phase = AuthPhase.PENDING_CONSENT
        self.sessions.save(session)
        logger.info("Authorization started for session %s", session.session_id[:8])
        return self.consent_url(session.state)

    def complete(
        self,
        session: Session,
        *,
        code: str | None,
        state: str | None,
        yahoo_guid: str | None = None,
    ) -> Credential:
        # Check and consume in one store operation so a state is honored exactly once.
        if not self.sessions.consume_state(session.session_id, state):
            logger.warning("Authorization state mismatch for session %s", session.session_id[:8])
            raise StateMismatch("Callback state does not match the session; start again.")

        session.state = None

        if not code:
            raise ExchangeFailed("Callback carried no authorization code.")

        try:
            grant = self.exchanger.exchange(code)
        except ExchangeFailed:
            logger.warning("Token exchange failed for session %s", session.session_id[:8])
            raise

        self.credentials.put(session.session_id, grant.credential)
        session.phase = AuthPhase.AUTHENTICATED
        session.yahoo_guid = yahoo_guid or grant.yahoo_guid
        self.sessions.save(session)
        logger.info("Authorization completed for session %s", session.session_id[:8])
        return grant.credential

    def logout(self, session: Session) -> None:
        self.credentials.clear(session.session_id)
        session.phase = AuthPhase.UNAUTHENTICATED
        session.state = None
        session.yahoo_guid = None
        self.sessions.save(session)
