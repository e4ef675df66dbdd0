"""Per-request context.

``RequestContext`` is the one object every middleware and handler reads
and mutates. One is created per inbound request and dropped once the
response is returned; it is never shared between requests.

Provides:
- Parsed request data: ``method``, ``url``, ``params``, ``headers``.
- Inter-middleware state: ``state``, ``user``, ``validated``.
- Outbound headers (``response_headers``) merged into every response
  built through ``ctx.respond``.
- Lazily built data-service clients: ``supabase()`` and ``supabase_admin()``.
- Cached body readers: ``json()`` and ``text()``.

The current context is also available through ``get_context()`` while
the request is being dispatched.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Awaitable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import anyio

from supaedge._internal.types import ClientFactory
from supaedge.data.env import DataServiceEnv
from supaedge.errors import ConfigurationError
from supaedge.http.forms import FormData, parse_form_data
from supaedge.http.headers import Headers, MutableHeaders
from supaedge.http.request import Request
from supaedge.http.response import Response
from supaedge.http.url import URL

_UNSET: Any = object()

REDIRECT_STATUSES = frozenset({301, 302, 307, 308})


@dataclass(frozen=True, slots=True)
class User:
    """The authenticated caller, set by ``AuthMiddleware``."""

    id: str
    email: str | None = None
    role: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ValidatedData:
    """Schema-validated request data, set by ``ValidatorMiddleware``."""

    body: Any = None
    query: Any = None
    params: Any = None


class ResponseBuilder:
    """Response helpers bound to one context.

    Every builder starts from a copy of ``ctx.response_headers`` and
    overlays its own content header; the shared header set itself is
    never modified, so builders can be called any number of times.
    """

    __slots__ = ("_ctx",)

    def __init__(self, ctx: RequestContext) -> None:
        self._ctx = ctx

    def _headers(self) -> MutableHeaders:
        return self._ctx.response_headers.copy()

    def json(self, data: Any, status: int = 200) -> Response:
        """Return a JSON response."""
        headers = self._headers()
        headers.set("Content-Type", "application/json")
        body = json_module.dumps(data).encode("utf-8")
        return Response(body=body, status=status, headers=tuple(headers.multi_items()))

    def text(self, data: str, status: int = 200) -> Response:
        """Return a plain text response."""
        headers = self._headers()
        headers.set("Content-Type", "text/plain; charset=utf-8")
        return Response(body=data.encode("utf-8"), status=status, headers=tuple(headers.multi_items()))

    def empty(self) -> Response:
        """Return an empty 204 response."""
        return Response(status=204, headers=tuple(self._headers().multi_items()))

    def redirect(self, url: str, status: int = 302) -> Response:
        """Return a redirect to *url* (301, 302, 307, or 308)."""
        if status not in REDIRECT_STATUSES:
            msg = f"Redirect status must be one of 301, 302, 307, 308; got {status}"
            raise ValueError(msg)
        headers = self._headers()
        headers.set("Location", url)
        return Response(status=status, headers=tuple(headers.multi_items()))


class RequestContext:
    """Mutable per-request state shared by the whole dispatch chain.

    The data-service client, the admin client, the client factory, and
    the environment can be injected at construction (tests do this);
    otherwise clients are built on first use from the environment.
    """

    __slots__ = (
        "_admin_client",
        "_background",
        "_body_lock",
        "_client",
        "_client_factory",
        "_env",
        "_json",
        "_text",
        "params",
        "request",
        "respond",
        "response_headers",
        "state",
        "user",
        "validated",
    )

    def __init__(
        self,
        request: Request,
        *,
        response_headers: MutableHeaders | None = None,
        client: Any = None,
        admin_client: Any = None,
        client_factory: ClientFactory | None = None,
        env: DataServiceEnv | None = None,
    ) -> None:
        self.request = request
        self.params: dict[str, str] = {}
        self.state: dict[str, Any] = {}
        self.user: User | None = None
        self.validated = ValidatedData()
        self.response_headers = response_headers if response_headers is not None else MutableHeaders()
        self.respond = ResponseBuilder(self)

        self._client = client
        self._admin_client = admin_client
        self._client_factory = client_factory
        self._env = env

        self._json: Any = _UNSET
        self._text: str | None = None
        self._body_lock = anyio.Lock()
        self._background: list[Awaitable[Any]] = []

    def __repr__(self) -> str:
        return f"<RequestContext {self.method} {self.url.path}>"

    # -- Request data --

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def url(self) -> URL:
        return self.request.url

    @property
    def headers(self) -> Headers:
        return self.request.headers

    # -- Data-service clients --

    def _get_env(self) -> DataServiceEnv:
        if self._env is None:
            self._env = DataServiceEnv.from_environ()
        return self._env

    def _get_factory(self) -> ClientFactory:
        if self._client_factory is None:
            from supaedge.data.client import create_supabase_client

            self._client_factory = create_supabase_client
        return self._client_factory

    def supabase(self) -> Any:
        """The data-service client acting as the caller.

        Built on first call with the anon key and the request's
        ``Authorization`` header, then reused for the rest of the request.
        """
        if self._client is None:
            env = self._get_env()
            auth = self.request.headers.get("authorization", "")
            self._client = self._get_factory()(env.url, env.anon_key, {"Authorization": auth})
        return self._client

    def supabase_admin(self) -> Any:
        """The data-service client with service-role privileges.

        Raises ``ConfigurationError`` if ``SUPABASE_SERVICE_ROLE_KEY``
        is not set.
        """
        if self._admin_client is None:
            env = self._get_env()
            if not env.service_role_key:
                msg = "Missing environment variable: SUPABASE_SERVICE_ROLE_KEY"
                raise ConfigurationError(msg)
            self._admin_client = self._get_factory()(env.url, env.service_role_key, {})
        return self._admin_client

    # -- Body access --

    async def json(self) -> Any:
        """Parse the request body as JSON.

        Parsed once; later calls return the same object. Raises
        ``ValueError`` (``json.JSONDecodeError``) on malformed input.
        """
        async with self._body_lock:
            if self._json is _UNSET:
                self._json = json_module.loads(await self.request.body())
        return self._json

    async def text(self) -> str:
        """Read the request body as UTF-8 text (cached)."""
        async with self._body_lock:
            if self._text is None:
                self._text = (await self.request.body()).decode("utf-8")
        return self._text

    async def form_data(self) -> FormData:
        """Parse the body as form data (URL-encoded or multipart).

        Not cached: each call parses the buffered body again.
        """
        ct = self.request.content_type or "application/x-www-form-urlencoded"
        return await parse_form_data(await self.request.body(), ct)

    # -- Background work --

    def wait_until(self, awaitable: Awaitable[Any]) -> None:
        """Run *awaitable* after the response has been sent.

        Failures are logged, never turned into a response.
        """
        self._background.append(awaitable)

    def pending_tasks(self) -> list[Awaitable[Any]]:
        """Drain and return the work registered with ``wait_until``."""
        tasks, self._background = self._background, []
        return tasks


# -- Current context --

context_var: ContextVar[RequestContext] = ContextVar("supaedge_context")
"""The current request context. Set by the app before dispatch."""


def get_context() -> RequestContext:
    """Return the context of the request being dispatched.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()
