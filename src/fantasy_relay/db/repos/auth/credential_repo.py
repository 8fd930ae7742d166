from __future__ import annotations

from sqlalchemy.orm import Session

from fantasy_relay.auth.credentials import Credential
from fantasy_relay.db.models.auth.credential import StoredCredential
from fantasy_relay.db.repos.base import BaseRepository


class CredentialRepository(BaseRepository[StoredCredential]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=StoredCredential)

    def upsert(self, session_id: str, credential: Credential) -> StoredCredential:
        row = self.get(session_id)
        if row is None:
            row = StoredCredential(session_id=session_id)
            row.apply(credential)
            return self.add(row)
        row.apply(credential)
        self.session.flush()
        return row
