from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fantasy_relay.core.config import Settings


@dataclass(frozen=True)
class DatabaseConfig:
    database_url: str
    echo: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseConfig:
        return cls(database_url=settings.database_url, echo=settings.db_echo)

    @property
    def is_sqlite_memory(self) -> bool:
        return self.database_url.startswith("sqlite") and self.database_url.endswith(":memory:")


def create_db_engine(cfg: DatabaseConfig) -> Engine:
    if cfg.is_sqlite_memory:
        # One shared connection, usable from the server's worker threads.
        return create_engine(
            cfg.database_url,
            echo=cfg.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(cfg.database_url, echo=cfg.echo, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions keep loaded rows usable after commit; stores return plain values anyway."""

    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
