from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from fantasy_relay.auth.sessions import AuthPhase, Session
from fantasy_relay.db.base import Base, TimestampMixin


class WebSessionRecord(Base, TimestampMixin):
    __tablename__ = "web_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    phase: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AuthPhase.UNAUTHENTICATED.value
    )
    oauth_state: Mapped[str | None] = mapped_column(String(128), nullable=True)
    yahoo_guid: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def to_session(self) -> Session:
        return Session(
            session_id=self.id,
            phase=AuthPhase(self.phase),
            state=self.oauth_state,
            yahoo_guid=self.yahoo_guid,
        )

    def apply(self, session: Session) -> None:
        self.phase = session.phase.value
        self.oauth_state = session.state
        self.yahoo_guid = session.yahoo_guid
