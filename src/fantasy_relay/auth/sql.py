from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession
from sqlalchemy.orm import sessionmaker

from fantasy_relay.auth.credentials import Credential
from fantasy_relay.auth.sessions import Session, new_session_id, same_state
from fantasy_relay.db.repos.auth import CredentialRepository, WebSessionRepository


class SqlCredentialStore:
    """Credential rows in the `credentials` table; every call is its own transaction."""

    def __init__(self, session_factory: sessionmaker[DbSession]) -> None:
        self.session_factory = session_factory

    def get(self, session_id: str) -> Credential | None:
        with self.session_factory() as db:
            row = CredentialRepository(db).get(session_id)
            return row.to_credential() if row is not None else None

    def put(self, session_id: str, credential: Credential) -> None:
        try:
            with self.session_factory.begin() as db:
                CredentialRepository(db).upsert(session_id, credential)
        except IntegrityError:
            # A concurrent put inserted the row first; the retry updates it.
            with self.session_factory.begin() as db:
                CredentialRepository(db).upsert(session_id, credential)

    def clear(self, session_id: str) -> None:
        with self.session_factory.begin() as db:
            CredentialRepository(db).delete_by_id(session_id)


class SqlSessionStore:
    def __init__(self, session_factory: sessionmaker[DbSession]) -> None:
        self.session_factory = session_factory

    def get(self, session_id: str | None) -> Session:
        if session_id:
            with self.session_factory() as db:
                row = WebSessionRepository(db).get(session_id)
                if row is not None:
                    return row.to_session()
        return Session(session_id=new_session_id(), is_new=True)

    def save(self, session: Session) -> None:
        try:
            with self.session_factory.begin() as db:
                WebSessionRepository(db).upsert(session)
        except IntegrityError:
            with self.session_factory.begin() as db:
                WebSessionRepository(db).upsert(session)
        session.is_new = False

    def delete(self, session_id: str) -> None:
        with self.session_factory.begin() as db:
            WebSessionRepository(db).delete_by_id(session_id)

    def consume_state(self, session_id: str, presented: str | None) -> bool:
        with self.session_factory.begin() as db:
            repo = WebSessionRepository(db)
            row = repo.get(session_id)
            if row is None or not same_state(row.oauth_state, presented):
                return False
            # The conditional UPDATE decides between concurrent callbacks.
            return repo.clear_pending_state(session_id, row.oauth_state)
