"""CORS middleware.

Headers are written into ``ctx.response_headers`` before the rest of
the chain runs, so every response built through ``ctx.respond`` carries
them, error responses included. ``OPTIONS`` requests are answered
directly with a 204 preflight response.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from supaedge.http.response import Response
from supaedge.middleware.protocol import Next

if TYPE_CHECKING:
    from supaedge.context import RequestContext

DEFAULT_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
DEFAULT_HEADERS = ("Authorization", "X-Client-Info", "Content-Type", "Accept", "apikey")


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS middleware configuration.

    ``allow_origins`` is one of:

    - ``"*"``: any origin (the default)
    - a single origin string, sent as-is
    - a tuple of allowed origins, the request origin is reflected if listed
    - a predicate ``(origin) -> bool``, the request origin is reflected if
      it returns true

    Usage::

        CORSConfig(
            allow_origins=("https://example.com",),
            allow_credentials=True,
        )
    """

    allow_origins: str | tuple[str, ...] | Callable[[str], bool] = "*"
    allow_methods: tuple[str, ...] = DEFAULT_METHODS
    allow_headers: tuple[str, ...] = DEFAULT_HEADERS
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 86400  # 24 hours


class CORSMiddleware:
    """CORS middleware with automatic preflight handling.

    Usage::

        app.add_middleware(CORSMiddleware(CORSConfig(
            allow_origins=("https://example.com",),
        )))
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    @property
    def _dynamic_origin(self) -> bool:
        cfg = self.config
        if cfg.allow_origins == "*":
            return cfg.allow_credentials
        return not isinstance(cfg.allow_origins, str)

    def _resolve_origin(self, origin: str | None) -> str:
        """Return the ``Access-Control-Allow-Origin`` value, or "" for none."""
        allowed = self.config.allow_origins

        if callable(allowed):
            return origin if origin and allowed(origin) else ""
        if isinstance(allowed, tuple):
            return origin if origin and origin in allowed else ""
        # Browsers reject "*" with credentials: reflect the origin instead
        if allowed == "*" and self.config.allow_credentials and origin:
            return origin
        return allowed

    def _set_cors_headers(self, ctx: RequestContext, origin: str | None) -> None:
        cfg = self.config
        headers = ctx.response_headers

        resolved = self._resolve_origin(origin)
        if resolved:
            headers.set("Access-Control-Allow-Origin", resolved)
        if cfg.allow_credentials:
            headers.set("Access-Control-Allow-Credentials", "true")
        if cfg.expose_headers:
            headers.set("Access-Control-Expose-Headers", ", ".join(cfg.expose_headers))
        if self._dynamic_origin:
            headers.append("Vary", "Origin")

    def _preflight_response(self, ctx: RequestContext) -> Response:
        cfg = self.config
        headers = ctx.response_headers.copy()
        headers.set("Access-Control-Allow-Methods", ", ".join(cfg.allow_methods))
        headers.set("Access-Control-Allow-Headers", ", ".join(cfg.allow_headers))
        headers.set("Access-Control-Max-Age", str(cfg.max_age))
        return Response(status=204, headers=tuple(headers.multi_items()))

    async def __call__(self, ctx: RequestContext, next: Next) -> Response:
        """Process the request with CORS handling."""
        self._set_cors_headers(ctx, ctx.headers.get("origin"))

        if ctx.method == "OPTIONS":
            return self._preflight_response(ctx)

        return await next()
