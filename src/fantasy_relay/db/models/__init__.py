from fantasy_relay.db.models.auth.credential import StoredCredential
from fantasy_relay.db.models.auth.web_session import WebSessionRecord

__all__ = [
    "StoredCredential",
    "WebSessionRecord",
]
