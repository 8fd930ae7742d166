from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import Session as DbSession

from fantasy_relay.auth.sessions import AuthPhase, Session
from fantasy_relay.db.models.auth.web_session import WebSessionRecord
from fantasy_relay.db.repos.base import BaseRepository


class WebSessionRepository(BaseRepository[WebSessionRecord]):
    def __init__(self, session: DbSession) -> None:
        super().__init__(session=session, model=WebSessionRecord)

    def upsert(self, web_session: Session) -> WebSessionRecord:
        row = self.get(web_session.session_id)
        if row is None:
            row = WebSessionRecord(id=web_session.session_id)
            row.apply(web_session)
            return self.add(row)
        row.apply(web_session)
        self.session.flush()
        return row

    def clear_pending_state(self, session_id: str, expected: str) -> bool:
        """Null the state only if the row is still pending with `expected`; True if it was."""

        result = self.session.execute(
            update(WebSessionRecord)
            .where(
                WebSessionRecord.id == session_id,
                WebSessionRecord.oauth_state == expected,
                WebSessionRecord.phase == AuthPhase.PENDING_CONSENT.value,
            )
            .values(oauth_state=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
