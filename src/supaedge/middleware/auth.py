"""Bearer-token authentication against the data service.

The token from ``Authorization: Bearer <token>`` is verified with
``ctx.supabase().auth.get_user(token)``. On success ``ctx.user`` is
set; otherwise the request is rejected with 401, unless the middleware
is optional, in which case ``ctx.user`` stays ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from supaedge.context import User
from supaedge.data.client import run_client_call
from supaedge.errors import HTTPError
from supaedge.http.response import Response
from supaedge.middleware.protocol import Next

if TYPE_CHECKING:
    from supaedge.context import RequestContext

logger = logging.getLogger("supaedge.auth")

_BEARER = "Bearer "


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Auth middleware configuration.

    ``optional=True`` lets unauthenticated requests through with
    ``ctx.user`` left as ``None``.
    """

    optional: bool = False


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def user_from_record(record: Any) -> User:
    """Build a ``User`` from a data-service user record (object or dict)."""
    return User(
        id=str(_field(record, "id")),
        email=_field(record, "email"),
        role=_field(record, "role"),
        metadata=dict(_field(record, "user_metadata") or {}),
    )


class AuthMiddleware:
    """Require (or optionally accept) a verified bearer token.

    Usage::

        @app.get("/me", middleware=[AuthMiddleware()])
        async def me(ctx):
            return ctx.respond.json({"id": ctx.user.id})
    """

    __slots__ = ("config",)

    def __init__(self, config: AuthConfig | None = None) -> None:
        self.config = config or AuthConfig()

    async def _get_user(self, ctx: RequestContext, token: str) -> Any:
        auth = ctx.supabase().auth
        result = await run_client_call(lambda: auth.get_user(token))
        return _field(result, "user") if result is not None else None

    async def __call__(self, ctx: RequestContext, next: Next) -> Response:
        optional = self.config.optional
        header = ctx.headers.get("authorization")

        if not header or not header.startswith(_BEARER):
            if optional:
                return await next()
            raise HTTPError.unauthorized("Missing or invalid Authorization header")

        token = header[len(_BEARER) :]

        try:
            record = await self._get_user(ctx, token)
        except Exception as exc:
            logger.debug("Token verification failed: %s", exc)
            if optional:
                return await next()
            raise HTTPError.unauthorized("Authentication failed") from exc

        if record is None:
            if optional:
                return await next()
            raise HTTPError.unauthorized("Invalid token")

        ctx.user = user_from_record(record)
        return await next()
