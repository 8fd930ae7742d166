"""
Named addresses for the documented Fantasy Sports API endpoints.

Every builder returns a ResourceAddress; nothing here touches the network.
Samples (relative to /fantasy/v2):

    users;use_login=1/games
    users;use_login=1/games;game_keys=223/leagues
    league/223.l.431/standings
    league/223.l.431/scoreboard;week=2
    league/223.l.431/transactions;team_key=223.l.431.t.1;types=waiver,pending_trade
    team/223.l.431.t.1/roster;week=10
"""

from __future__ import annotations

from collections.abc import Sequence

from fantasy_relay.addressing.resource import FilterValue, ResourceAddress


def _as_list(keys: str | Sequence[str]) -> list[str]:
    if isinstance(keys, str):
        return [k for k in keys.split(",") if k]
    return list(keys)


def logged_in_users() -> ResourceAddress:
    return ResourceAddress("users", params={"use_login": 1})


def user_games(*, available_only: bool = False) -> ResourceAddress:
    games = ResourceAddress("games", filters={"is_available": 1} if available_only else None)
    return logged_in_users().sub(games)


def user_game_leagues(game_keys: str | Sequence[str]) -> ResourceAddress:
    games = ResourceAddress("games", keys=_as_list(game_keys), chain=["leagues"])
    return logged_in_users().sub(games)


def user_game_teams(game_keys: str | Sequence[str]) -> ResourceAddress:
    games = ResourceAddress("games", keys=_as_list(game_keys), chain=["teams"])
    return logged_in_users().sub(games)


def user_game_all(game_keys: str | Sequence[str]) -> ResourceAddress:
    """Leagues and teams of the logged-in user for the given games, in one round trip."""

    games = ResourceAddress("games", keys=_as_list(game_keys), out=["leagues", "teams"])
    return logged_in_users().sub(games)


def game(game_key: str, sub_resource: str = "metadata") -> ResourceAddress:
    return ResourceAddress("game", keys=game_key, chain=[sub_resource])


def league(league_key: str, sub_resource: str = "metadata") -> ResourceAddress:
    return ResourceAddress("league", keys=league_key, chain=[sub_resource])


def leagues(league_keys: str | Sequence[str], sub_resource: str | None = None) -> ResourceAddress:
    chain = [sub_resource] if sub_resource else []
    return ResourceAddress("leagues", keys=_as_list(league_keys), chain=chain)


def league_standings(league_keys: str | Sequence[str]) -> ResourceAddress:
    keys = _as_list(league_keys)
    if len(keys) == 1:
        return league(keys[0], "standings")
    return leagues(keys, "standings")


def league_scoreboard(
    league_keys: str | Sequence[str], *, week: int | str | None = None
) -> ResourceAddress:
    keys = _as_list(league_keys)
    scoreboard = ResourceAddress(
        "scoreboard", filters={"week": week} if week is not None else None
    )
    if len(keys) == 1:
        return ResourceAddress("league", keys=keys[0], chain=[scoreboard])
    return ResourceAddress("leagues", keys=keys, chain=[scoreboard])


def league_players(league_key: str, **filters: FilterValue) -> ResourceAddress:
    """Players collection under a league, e.g. `status="A", position="QB"`."""

    players = ResourceAddress("players", filters=filters)
    return ResourceAddress("league", keys=league_key, chain=[players])


def league_transactions(
    league_key: str,
    *,
    types: Sequence[str] | None = None,
    team_key: str | None = None,
    count: int | None = None,
) -> ResourceAddress:
    filters: dict[str, FilterValue] = {}
    if types:
        filters["types" if len(types) > 1 else "type"] = list(types)
    if team_key:
        filters["team_key"] = team_key
    if count is not None:
        if count <= 0:
            raise ValueError("count must be greater than 0")
        filters["count"] = count
    return ResourceAddress("league", keys=league_key, chain=["transactions"], filters=filters)


def league_transactions_target(league_key: str) -> ResourceAddress:
    """POST target for add/drop/trade proposals."""

    return ResourceAddress("league", keys=league_key, chain=["transactions"])


def transactions(transaction_keys: str | Sequence[str]) -> ResourceAddress:
    return ResourceAddress("transactions", keys=_as_list(transaction_keys))


def transaction(transaction_key: str) -> ResourceAddress:
    return ResourceAddress("transaction", keys=transaction_key)


def team(team_key: str, sub_resource: str = "metadata") -> ResourceAddress:
    return ResourceAddress("team", keys=team_key, chain=[sub_resource])


def team_roster(
    team_key: str, *, week: int | str | None = None, date: str | None = None
) -> ResourceAddress:
    if week is not None and date is not None:
        raise ValueError("Pass either week or date, not both")
    filters: dict[str, FilterValue] = {}
    if week is not None:
        filters["week"] = week
    if date is not None:
        filters["date"] = date
    return ResourceAddress("team", keys=team_key, chain=["roster"], filters=filters)


def player(player_key: str, sub_resource: str = "metadata") -> ResourceAddress:
    return ResourceAddress("player", keys=player_key, chain=[sub_resource])
