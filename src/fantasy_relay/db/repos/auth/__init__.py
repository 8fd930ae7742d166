from __future__ import annotations

from fantasy_relay.db.repos.auth.credential_repo import CredentialRepository
from fantasy_relay.db.repos.auth.web_session_repo import WebSessionRepository

__all__ = [
    "CredentialRepository",
    "WebSessionRepository",
]
