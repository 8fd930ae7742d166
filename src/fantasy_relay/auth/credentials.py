from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Credential:
    """Delegated-access token for one session. Treat as opaque outside auth/transport."""

    access_token: str
    token_type: str = "bearer"
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def __repr__(self) -> str:
        return f"Credential(token_type={self.token_type!r}, expires_at={self.expires_at!r})"

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    @classmethod
    def from_token_response(
        cls, payload: Mapping[str, Any], *, now: datetime | None = None
    ) -> Credential:
        """Build from an OAuth2 token endpoint reply; raises ValueError when unusable."""

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Token response is missing access_token")

        expires_at: datetime | None = None
        expires_in = payload.get("expires_in")
        if expires_in is not None:
            try:
                expires_at = (now or utcnow()) + timedelta(seconds=int(float(expires_in)))
            except (TypeError, ValueError, OverflowError) as e:
                raise ValueError(f"Invalid expires_in: {expires_in!r}") from e

        refresh_token = payload.get("refresh_token")
        return cls(
            access_token=access_token,
            token_type=str(payload.get("token_type") or "bearer"),
            refresh_token=refresh_token if isinstance(refresh_token, str) else None,
            expires_at=expires_at,
        )


class CredentialStore(Protocol):
    def get(self, session_id: str) -> Credential | None: ...

    def put(self, session_id: str, credential: Credential) -> None: ...

    def clear(self, session_id: str) -> None: ...


class InMemoryCredentialStore:
    """
    Process-local store.

    One lock per stored session: readers and writers of the same session are
    serialized, different sessions never wait on each other. The registry lock
    is only held while looking up a session's lock. Locks exist only for
    sessions that hold a credential, so unknown ids leave nothing behind.
    """

    def __init__(self) -> None:
        self._items: dict[str, Credential] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = self._locks[session_id] = threading.Lock()
            return lock

    def get(self, session_id: str) -> Credential | None:
        with self._registry_lock:
            lock = self._locks.get(session_id)
        if lock is None:
            # Never stored (or cleared); a single dict read is atomic.
            return self._items.get(session_id)
        with lock:
            return self._items.get(session_id)

    def put(self, session_id: str, credential: Credential) -> None:
        with self._lock_for(session_id):
            self._items[session_id] = credential

    def clear(self, session_id: str) -> None:
        with self._registry_lock:
            lock = self._locks.pop(session_id, None)
        if lock is None:
            self._items.pop(session_id, None)
            return
        with lock:
            self._items.pop(session_id, None)

