from __future__ import annotations

import typer

from fantasy_relay.addressing.composer import compose
from fantasy_relay.addressing.resource import ResourceAddress
from fantasy_relay.core.config import settings
from fantasy_relay.core.errors import InvalidChaining
from fantasy_relay.core.logging import configure_logging

app = typer.Typer(no_args_is_help=True)


def _parse_pairs(values: list[str], option: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {raw!r}", param_hint=option)
        pairs[name] = value
    return pairs


@app.command("compose")
def compose_cmd(
    entity: str = typer.Argument(..., help="Entity or collection (e.g. league, teams)."),
    key: list[str] = typer.Option([], "--key", "-k", help="Resource key; repeat for several."),
    param: list[str] = typer.Option(
        [], "--param", help="Segment parameter NAME=VALUE (e.g. use_login=1)."
    ),
    sub: list[str] = typer.Option([], "--sub", "-s", help="Chained sub-resource; repeatable."),
    filter_: list[str] = typer.Option([], "--filter", "-f", help="Filter NAME=VALUE; repeatable."),
    out: list[str] = typer.Option([], "--out", "-o", help="out= sub-resource; repeatable."),
) -> None:
    """Print the remote path for an address. No network access."""

    address = ResourceAddress(
        entity,
        keys=key,
        params=_parse_pairs(param, "--param"),
        chain=sub,
        filters=_parse_pairs(filter_, "--filter"),
        out=out,
    )
    try:
        path = compose(address)
    except InvalidChaining as e:
        typer.echo(f"Invalid address: {e}", err=True)
        raise typer.Exit(code=2) from e
    typer.echo(path)


@app.command("init-db")
def init_db_cmd() -> None:
    """Create the session and credential tables (use alembic for managed databases)."""

    import fantasy_relay.db.models  # noqa: F401
    from fantasy_relay.db import Base, DatabaseConfig, create_db_engine

    engine = create_db_engine(DatabaseConfig.from_settings(settings))
    Base.metadata.create_all(engine)
    typer.echo(f"Initialized tables: {', '.join(sorted(Base.metadata.tables))}")


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
) -> None:
    """Run the HTTP relay with uvicorn."""

    import uvicorn

    from fantasy_relay.web.app import create_app

    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings=settings), host=host, port=port)
