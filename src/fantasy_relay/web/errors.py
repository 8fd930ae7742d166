"""
Error responses for the HTTP surface.

All relay errors render as:
{
    "error": {
        "code": "ERROR_CODE",
        "message": "Human-readable message",
        "detail": null
    }
}
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fantasy_relay.core.errors import (
    Cancelled,
    CredentialRejected,
    DecodeDeferred,
    ExchangeFailed,
    InvalidChaining,
    NotAuthenticated,
    RelayError,
    StateMismatch,
    TransportError,
)

logger = logging.getLogger(__name__)

# Most specific first; Cancelled must win over TransportError.
_STATUS_BY_ERROR: tuple[tuple[type[RelayError], int, str], ...] = (
    (NotAuthenticated, 401, "NOT_AUTHENTICATED"),
    (CredentialRejected, 401, "CREDENTIAL_REJECTED"),
    (StateMismatch, 400, "STATE_MISMATCH"),
    (InvalidChaining, 400, "INVALID_ADDRESS"),
    (ExchangeFailed, 502, "EXCHANGE_FAILED"),
    (Cancelled, 504, "CANCELLED"),
    (TransportError, 502, "TRANSPORT_ERROR"),
    (DecodeDeferred, 502, "DECODE_DEFERRED"),
)


def error_response(
    status_code: int, code: str, message: str, detail: str | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "detail": detail}},
    )


async def relay_error_handler(request: Request, exc: Exception) -> JSONResponse:
    for error_type, status_code, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code, code = 500, "RELAY_ERROR"

    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return error_response(status_code, code, str(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RelayError, relay_error_handler)
