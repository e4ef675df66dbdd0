"""Outbound HTTP response.

Handlers rarely build a ``Response`` directly: ``ctx.respond`` produces
one with the context's outbound headers already merged in. Middleware
that decorates a response uses the ``with_*`` helpers, which copy.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """Status, ordered header pairs, and a byte body.

    Header names may repeat (``Vary``, ``Set-Cookie``); lookups ignore
    case. ``Content-Type`` has no special slot.
    """

    body: bytes = b""
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Copy with one more header pair appended."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        return replace(self, headers=self.headers + tuple(headers.items()))

    def without_body(self) -> Response:
        """Copy with an empty body; status and headers are kept (HEAD)."""
        return replace(self, body=b"")

    def _values(self, name: str) -> list[str]:
        wanted = name.lower()
        return [v for k, v in self.headers if k.lower() == wanted]

    def header(self, name: str) -> str | None:
        """First value of *name*, or ``None``."""
        values = self._values(name)
        return values[0] if values else None

    def header_list(self, name: str) -> list[str]:
        return self._values(name)

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json_module.loads(self.body)
