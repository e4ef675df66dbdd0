"""ASGI 3.0 type aliases and the parsed HTTP scope.

``Request.from_asgi`` is the only consumer of ``HTTPScope``; handlers
and middleware see ``Request`` and ``RequestContext`` instead.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias
from urllib.parse import quote

Message: TypeAlias = MutableMapping[str, Any]
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True, slots=True)
class HTTPScope:
    """The parts of an ``http`` scope a request is built from."""

    method: str
    scheme: str
    path: str
    query_string: str
    host: str
    headers: tuple[tuple[bytes, bytes], ...]
    http_version: str
    client: tuple[str, int] | None

    @classmethod
    def from_scope(cls, scope: Scope) -> "HTTPScope":
        scheme = scope.get("scheme", "http")
        headers = tuple((bytes(k), bytes(v)) for k, v in scope.get("headers", ()))
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            scheme=scheme,
            path=_encoded_path(scope),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            host=_host(headers, scope.get("server"), scheme),
            headers=headers,
            http_version=scope.get("http_version", "1.1"),
            client=(client[0], client[1]) if client else None,
        )


def _host(
    headers: tuple[tuple[bytes, bytes], ...],
    server: tuple[str, int] | None,
    scheme: str,
) -> str:
    """``Host`` header, else the server address, else ``localhost``."""
    for name, value in headers:
        if name.lower() == b"host":
            return value.decode("latin-1")
    if not server:
        return "localhost"
    name, port = server[0], server[1]
    if port is None or port == _DEFAULT_PORTS.get(scheme):
        return name
    return f"{name}:{port}"


def _encoded_path(scope: Scope) -> str:
    """The request path, still percent-encoded.

    ``raw_path`` is preferred; the decoded ``path`` is re-quoted when a
    server omits it. Either way an encoded ``?`` or ``#`` stays inside
    the path.
    """
    raw = scope.get("raw_path")
    if raw:
        return bytes(raw).decode("latin-1").partition("?")[0]
    return quote(scope["path"], safe="/:@!$&'()*+,;=~-._")
