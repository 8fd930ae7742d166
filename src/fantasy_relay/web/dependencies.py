"""
Composition root and request-scoped dependencies for the HTTP surface.

Everything the routes need hangs off one RelayServices object stored on
`app.state`, so tests can build the app around fake transports and stores.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.orm import Session as DbSession
from sqlalchemy.orm import sessionmaker

from fantasy_relay.auth.credentials import CredentialStore
from fantasy_relay.auth.flow import AuthorizationFlow, OAuthClientConfig, OAuthTokenClient
from fantasy_relay.auth.sessions import Session, SessionStore
from fantasy_relay.auth.sql import SqlCredentialStore, SqlSessionStore
from fantasy_relay.core.config import Settings
from fantasy_relay.db import DatabaseConfig, create_db_engine, create_session_factory
from fantasy_relay.relay.relay import RequestRelay
from fantasy_relay.transport.authenticated import AuthenticatedTransport
from fantasy_relay.transport.client import BaseHttpClient


@dataclass
class RelayServices:
    settings: Settings
    sessions: SessionStore
    credentials: CredentialStore
    flow: AuthorizationFlow
    relay: RequestRelay
    clients: tuple[BaseHttpClient, ...] = ()

    def close(self) -> None:
        for client in self.clients:
            client.close()


def build_services(
    settings: Settings,
    *,
    session_factory: sessionmaker[DbSession] | None = None,
    sessions: SessionStore | None = None,
    credentials: CredentialStore | None = None,
    fantasy_transport: httpx.BaseTransport | None = None,
    token_transport: httpx.BaseTransport | None = None,
) -> RelayServices:
    """Wire stores, flow and relay from settings; stores default to the SQL database."""

    if sessions is None or credentials is None:
        if session_factory is None:
            engine = create_db_engine(DatabaseConfig.from_settings(settings))
            session_factory = create_session_factory(engine)
        sessions = sessions or SqlSessionStore(session_factory)
        credentials = credentials or SqlCredentialStore(session_factory)

    oauth = OAuthClientConfig(
        client_id=settings.require_client_id(),
        client_secret=settings.require_client_secret(),
        auth_url=settings.auth_url,
        token_url=settings.token_url,
        redirect_uri=settings.redirect_uri,
        scopes=tuple(settings.yahoo_scopes),
    )
    token_http = BaseHttpClient(
        base_url=settings.token_url,
        timeout_s=settings.request_timeout_s,
        transport=token_transport,
    )
    fantasy_http = BaseHttpClient(
        base_url=settings.fantasy_base_url,
        timeout_s=settings.request_timeout_s,
        transport=fantasy_transport,
    )

    flow = AuthorizationFlow(
        config=oauth,
        sessions=sessions,
        credentials=credentials,
        exchanger=OAuthTokenClient(http=token_http, config=oauth),
    )
    query_params = {"format": settings.response_format} if settings.response_format else None
    relay = RequestRelay(
        credentials=credentials,
        transport=AuthenticatedTransport(http=fantasy_http),
        query_params=query_params,
    )
    return RelayServices(
        settings=settings,
        sessions=sessions,
        credentials=credentials,
        flow=flow,
        relay=relay,
        clients=(token_http, fantasy_http),
    )


def get_services(request: Request) -> RelayServices:
    return request.app.state.services


ServicesDependency = Annotated[RelayServices, Depends(get_services)]


def get_session(request: Request, services: ServicesDependency) -> Session:
    """Load the caller's session from its cookie, or start a new unsaved one."""

    return services.sessions.get(request.cookies.get(services.settings.session_cookie_name))


SessionDependency = Annotated[Session, Depends(get_session)]
