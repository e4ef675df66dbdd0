"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

import anyio

from supaedge._internal.asgi import HTTPScope, Receive, Scope
from supaedge.http.headers import Headers
from supaedge.http.url import URL


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, url, headers) is frozen at creation. The body is
    read from the ASGI ``receive`` callable once, buffered, and every
    later ``body()`` call returns the same bytes. Parsed views of the
    body (JSON, text, form) live on ``RequestContext``.
    """

    method: str
    url: URL
    headers: Headers
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for the buffered body
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    _lock: anyio.Lock = field(default_factory=anyio.Lock, repr=False, compare=False)

    # -- Computed properties --

    @property
    def path(self) -> str:
        """The URL path."""
        return self.url.path

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then the
        same bytes are returned on subsequent calls. Concurrent callers
        wait for the first read instead of racing on ``receive``.
        """
        async with self._lock:
            if "_body" not in self._cache:
                chunks = [chunk async for chunk in self._stream()]
                self._cache["_body"] = b"".join(chunks)
        return self._cache["_body"]

    async def _stream(self) -> AsyncGenerator[bytes]:
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        http = HTTPScope.from_scope(scope)
        url = URL(
            scheme=http.scheme,
            host=http.host,
            path=http.path,
            query_string=http.query_string,
        )
        return cls(
            method=http.method,
            url=url,
            headers=Headers(http.headers),
            http_version=http.http_version,
            client=http.client,
            _receive=receive,
        )

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        """Create a Request directly, without an ASGI server.

        The body is pre-buffered, so ``body()`` never touches a receive
        callable. Used by ``App.handle()`` callers and tests::

            request = Request.build("POST", "http://localhost/items", body=b"{}")
        """
        request = cls(
            method=method.upper(),
            url=URL.parse(url),
            headers=Headers.from_mapping(headers),
        )
        request._cache["_body"] = body
        return request
