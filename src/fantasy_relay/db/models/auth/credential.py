from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fantasy_relay.auth.credentials import Credential
from fantasy_relay.db.base import Base, TimestampMixin


def _as_utc(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


class StoredCredential(Base, TimestampMixin):
    __tablename__ = "credentials"

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    token_type: Mapped[str] = mapped_column(String(32), nullable=False, default="bearer")

    # SQLite drops tzinfo on the way back; values are always written as UTC.
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_credential(self) -> Credential:
        return Credential(
            access_token=self.access_token,
            token_type=self.token_type,
            refresh_token=self.refresh_token,
            expires_at=_as_utc(self.expires_at),
        )

    def apply(self, credential: Credential) -> None:
        self.access_token = credential.access_token
        self.refresh_token = credential.refresh_token
        self.token_type = credential.token_type
        self.expires_at = _as_utc(credential.expires_at)
