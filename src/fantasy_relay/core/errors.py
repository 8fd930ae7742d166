from __future__ import annotations


class RelayError(RuntimeError):
    """Base exception for failures raised by the relay core."""


class NotAuthenticated(RelayError):
    """No credential (or only an expired one) exists for the session."""


class StateMismatch(RelayError):
    """The `state` echoed on the authorization callback did not match the session."""


class ExchangeFailed(RelayError):
    """Exchanging an authorization code for a credential failed (network or remote rejection)."""


class CredentialRejected(RelayError):
    """The remote service refused the session's credential (HTTP 401/403)."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidChaining(ValueError, RelayError):
    """A ResourceAddress cannot be rendered into a valid remote path."""


class TransportError(RelayError):
    """HTTP/network/transport layer failures (timeouts, connection errors, etc.)."""


class Cancelled(TransportError):
    """The caller's deadline passed before or during the outbound call."""


class DecodeDeferred(RelayError):
    """The response body is not something this core decodes; hand it to the schema layer."""
