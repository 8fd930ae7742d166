from __future__ import annotations

import logging
from dataclasses import dataclass

from fantasy_relay.auth.credentials import Credential
from fantasy_relay.core.errors import CredentialRejected, NotAuthenticated
from fantasy_relay.relay.types import RemoteRequest, RemoteResponse
from fantasy_relay.transport.client import BaseHttpClient

logger = logging.getLogger(__name__)

REJECTED_STATUSES = frozenset({401, 403})


@dataclass
class AuthenticatedTransport:
    """
    Issues RemoteRequests with the session credential as an Authorization header.

    The credential is applied per request and never written into the URI.
    401/403 replies surface as CredentialRejected; nothing is retried.
    """

    http: BaseHttpClient

    def send(
        self,
        credential: Credential | None,
        request: RemoteRequest,
        *,
        deadline: float | None = None,
    ) -> RemoteResponse:
        if credential is None:
            raise NotAuthenticated("No credential available for this session.")

        headers = {"Authorization": credential.authorization_header}
        if request.content_type:
            headers["Content-Type"] = request.content_type

        resp = self.http.request(
            request.verb.value,
            request.path,
            params=request.params or None,
            content=request.body,
            headers=headers,
            deadline=deadline,
        )

        if resp.status_code in REJECTED_STATUSES:
            logger.info(
                "Remote rejected credential: %s %s -> %s",
                request.verb.value,
                request.path,
                resp.status_code,
            )
            raise CredentialRejected(
                f"Remote service rejected the credential (HTTP {resp.status_code}).",
                status_code=resp.status_code,
            )

        return resp
