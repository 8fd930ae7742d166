"""
FastAPI application: authorization handshake and read-only relay routes.

Relay routes hand back the remote body, status and content type unmodified;
decoding into typed records is left to the consumer.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, FastAPI, Path, Query, Response
from fastapi.responses import RedirectResponse

from fantasy_relay.addressing import catalog
from fantasy_relay.addressing.resource import ResourceAddress
from fantasy_relay.auth.sessions import Session
from fantasy_relay.core.config import Settings
from fantasy_relay.relay.types import RemoteResponse
from fantasy_relay.web.dependencies import (
    RelayServices,
    ServicesDependency,
    SessionDependency,
    build_services,
)
from fantasy_relay.web.errors import register_error_handlers

logger = logging.getLogger(__name__)

GameKeys = Annotated[str, Path(pattern=r"^[0-9a-z]+(,[0-9a-z]+)*$")]
LeagueKeys = Annotated[str, Path(pattern=r"^[0-9a-zA-Z.]+(,[0-9a-zA-Z.]+)*$")]

auth_router = APIRouter(prefix="/yahoo/auth", tags=["auth"])
fantasy_router = APIRouter(prefix="/yahoo/users", tags=["fantasy"])


def _with_session_cookie(
    response: Response, session: Session, services: RelayServices
) -> Response:
    settings = services.settings
    response.set_cookie(
        settings.session_cookie_name,
        session.session_id,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


def _relay(response: RemoteResponse) -> Response:
    return Response(
        content=response.content,
        status_code=response.status_code,
        media_type=response.content_type,
    )


# -----------------------------
# Authorization
# -----------------------------


@auth_router.get("/")
def begin_authorization(services: ServicesDependency, session: SessionDependency) -> Response:
    url = services.flow.begin(session)
    return _with_session_cookie(RedirectResponse(url, status_code=302), session, services)


@auth_router.get("/callback")
def authorization_callback(
    services: ServicesDependency,
    session: SessionDependency,
    code: str | None = None,
    state: str | None = None,
    xoauth_yahoo_guid: str | None = None,
) -> Response:
    services.flow.complete(session, code=code, state=state, yahoo_guid=xoauth_yahoo_guid)
    redirect = RedirectResponse(services.settings.landing_url, status_code=302)
    return _with_session_cookie(redirect, session, services)


@auth_router.get("/logout")
def logout(services: ServicesDependency, session: SessionDependency) -> Response:
    services.flow.logout(session)
    redirect = RedirectResponse(services.settings.landing_url, status_code=302)
    return _with_session_cookie(redirect, session, services)


# -----------------------------
# Fantasy resources
# -----------------------------


def _get(services: RelayServices, session: Session, address: ResourceAddress) -> Response:
    return _relay(services.relay.get(session.session_id, address))


@fantasy_router.get("/games")
def user_games(
    services: ServicesDependency,
    session: SessionDependency,
    available_only: bool = Query(False),
) -> Response:
    return _get(services, session, catalog.user_games(available_only=available_only))


@fantasy_router.get("/game/{game_keys}")
def user_game_all(
    game_keys: GameKeys, services: ServicesDependency, session: SessionDependency
) -> Response:
    return _get(services, session, catalog.user_game_all(game_keys))


@fantasy_router.get("/game/{game_keys}/leagues")
def user_game_leagues(
    game_keys: GameKeys, services: ServicesDependency, session: SessionDependency
) -> Response:
    return _get(services, session, catalog.user_game_leagues(game_keys))


@fantasy_router.get("/game/{game_keys}/teams")
def user_game_teams(
    game_keys: GameKeys, services: ServicesDependency, session: SessionDependency
) -> Response:
    return _get(services, session, catalog.user_game_teams(game_keys))


@fantasy_router.get("/leagues/{league_keys}/scoreboard")
def league_scoreboard(
    league_keys: LeagueKeys,
    services: ServicesDependency,
    session: SessionDependency,
    week: int | None = Query(None, ge=1),
) -> Response:
    return _get(services, session, catalog.league_scoreboard(league_keys, week=week))


@fantasy_router.get("/leagues/{league_keys}/standings")
def league_standings(
    league_keys: LeagueKeys, services: ServicesDependency, session: SessionDependency
) -> Response:
    return _get(services, session, catalog.league_standings(league_keys))


def create_app(services: RelayServices | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the app; without explicit services they are wired from settings."""

    if services is None:
        if settings is None:
            from fantasy_relay.core.config import settings as default_settings

            settings = default_settings
        services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.services.close()

    app = FastAPI(title="Fantasy Relay", lifespan=lifespan)
    app.state.services = services
    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(fantasy_router)
    return app
