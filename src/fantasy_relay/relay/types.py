from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from fantasy_relay.core.errors import DecodeDeferred


class HttpVerb(StrEnum):
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"


@dataclass(frozen=True)
class RemoteRequest:
    """Fully composed call: verb, path relative to the API base, optional body."""

    verb: HttpVerb
    path: str
    body: bytes | None = None
    content_type: str | None = None
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RemoteResponse:
    """Raw remote reply handed to the schema layer for decoding."""

    status_code: int
    content: bytes
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON; anything else belongs to the schema layer."""

        try:
            return json.loads(self.content)
        except ValueError as e:
            raise DecodeDeferred(
                f"Response body is not JSON (content-type={self.content_type!r})"
            ) from e
