from __future__ import annotations

import hmac
import secrets
import threading
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Protocol


class AuthPhase(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    PENDING_CONSENT = "pending_consent"
    AUTHENTICATED = "authenticated"


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def same_state(expected: str | None, presented: str | None) -> bool:
    """Constant-time comparison; an empty value on either side never matches."""

    if not expected or not presented:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


@dataclass
class Session:
    """
    Server-side state correlating one browser with its authorization progress.

    `state` holds the anti-forgery value between redirect and callback; it is
    consumed by the first callback that presents it. The credential itself
    lives in a CredentialStore keyed by `session_id`.
    """

    session_id: str
    phase: AuthPhase = AuthPhase.UNAUTHENTICATED
    state: str | None = None
    yahoo_guid: str | None = None
    is_new: bool = field(default=False, compare=False)


class SessionStore(Protocol):
    def get(self, session_id: str | None) -> Session: ...

    def save(self, session: Session) -> None: ...

    def delete(self, session_id: str) -> None: ...

    def consume_state(self, session_id: str, presented: str | None) -> bool:
        """
        Atomically clear the stored state of a pending session if it matches.

        Returns True for exactly one caller per issued state.
        """
        ...


class InMemorySessionStore:
    """Process-local sessions; returns copies so callers never share a record."""

    def __init__(self) -> None:
        self._items: dict[str, Session] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str | None) -> Session:
        if session_id:
            with self._lock:
                found = self._items.get(session_id)
            if found is not None:
                return replace(found, is_new=False)
        return Session(session_id=new_session_id(), is_new=True)

    def save(self, session: Session) -> None:
        with self._lock:
            self._items[session.session_id] = replace(session, is_new=False)
        session.is_new = False

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._items.pop(session_id, None)

    def consume_state(self, session_id: str, presented: str | None) -> bool:
        with self._lock:
            found = self._items.get(session_id)
            if (
                found is None
                or found.phase != AuthPhase.PENDING_CONSENT
                or not same_state(found.state, presented)
            ):
                return False
            self._items[session_id] = replace(found, state=None)
            return True
