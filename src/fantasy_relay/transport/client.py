from __future__ import annotations

import json
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from fantasy_relay.core.errors import Cancelled, TransportError
from fantasy_relay.relay.types import RemoteResponse

Json = dict[str, Any]


@dataclass
class BaseHttpClient:
    """
    Thin httpx.Client wrapper returning raw RemoteResponse values.

    - Uses a single underlying httpx.Client for connection pooling.
    - Never raises for HTTP status; callers decide what a status means.
    - Network failures become TransportError, deadline expiry becomes Cancelled.
    """

    base_url: str
    timeout_s: float = 30.0
    connect_timeout_s: float = 10.0
    headers: Mapping[str, str] = field(default_factory=dict)

    transport: httpx.BaseTransport | None = None

    _monotonic: Callable[[], float] = field(default=time.monotonic, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.Client(
            base_url=self.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(self.timeout_s, connect=self.connect_timeout_s),
            headers=dict(self.headers),
            transport=self.transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BaseHttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _timeout_for(self, deadline: float | None) -> httpx.Timeout | None:
        if deadline is None:
            return None
        remaining = deadline - self._monotonic()
        if remaining <= 0:
            raise Cancelled("Deadline expired before the request was sent.")
        return httpx.Timeout(min(self.timeout_s, remaining))

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        content: bytes | None = None,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
        deadline: float | None = None,
    ) -> RemoteResponse:
        """
        Perform an HTTP request and return the raw response.

        `deadline` is a time.monotonic() value; when given, the request timeout
        is capped to the time left and a timeout is reported as Cancelled.
        """
        timeout = self._timeout_for(deadline)
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if auth is not None:
            kwargs["auth"] = auth

        try:
            resp = self._client.request(
                method=method,
                url=path.lstrip("/"),
                params=params,
                content=content,
                data=data,
                headers=headers,
                **kwargs,
            )
        except httpx.TimeoutException as e:
            if deadline is not None:
                raise Cancelled(f"Deadline expired during {method} {path}") from e
            raise TransportError(str(e)) from e
        except httpx.TransportError as e:
            raise TransportError(str(e)) from e

        return RemoteResponse(
            status_code=resp.status_code,
            content=resp.content,
            content_type=resp.headers.get("content-type"),
        )

    def request_json(
        self,
        method: str,
        path: str,
        *,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
    ) -> Json:
        """
        Perform an HTTP request and return parsed JSON (dict).
        Raises TransportError on transport issues / non-2xx / non-object bodies.
        """
        resp = self.request(method, path, data=data, headers=headers, auth=auth)

        if not resp.ok:
            raise TransportError(f"HTTP {resp.status_code} for {method} {path}: {resp.text}")

        try:
            payload = json.loads(resp.content)
        except ValueError as e:
            raise TransportError("Response was not valid JSON.") from e

        if not isinstance(payload, dict):
            raise TransportError(f"Expected JSON object, got {type(payload)}")

        return payload
