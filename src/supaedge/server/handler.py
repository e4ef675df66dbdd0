"""Request pipeline — one inbound request in, exactly one Response out.

Resolves the effective path, matches a route, runs the composed chain
(global middleware, route middleware, handler), translates any error,
and strips the body from HEAD responses.
"""

import re
from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import Any

from supaedge._internal.invoke import invoke
from supaedge.config import AppConfig
from supaedge.context import RequestContext, context_var
from supaedge.errors import NotFound
from supaedge.http.response import Response
from supaedge.middleware.chain import compose
from supaedge.routing.router import Router
from supaedge.server.errors import handle_error
from supaedge.server.sender import body_allowed


@lru_cache(maxsize=8)
def _prefix_regex(function_prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(function_prefix.rstrip('/'))}/[^/]+")


def resolve_path(ctx: RequestContext, config: AppConfig) -> str:
    """Return the percent-encoded path the router should see.

    With an explicit ``base_path`` the path is used unchanged (the base
    path is already part of every route pattern). Otherwise a leading
    ``{function_prefix}/<name>`` is stripped so routes can be written
    without it.
    """
    path = ctx.url.path
    if config.base_path:
        return path

    m = _prefix_regex(config.function_prefix).match(path)
    if m is None:
        return path
    return path[m.end() :] or "/"


async def _call_handler(handler: Callable[..., Any], ctx: RequestContext) -> Response:
    response = await invoke(handler, ctx)
    if not isinstance(response, Response):
        name = getattr(handler, "__qualname__", repr(handler))
        msg = f"Handler {name} returned {type(response).__name__}, expected Response"
        raise TypeError(msg)
    return response


async def dispatch(
    ctx: RequestContext,
    *,
    router: Router,
    middleware: Sequence[Callable[..., Any]],
    config: AppConfig,
) -> Response:
    """Match and run the chain for *ctx*. Errors propagate to the caller."""
    match = router.match_path(ctx.method, resolve_path(ctx, config))

    if match is None:
        # Global middleware still runs, so CORS and friends reach the 404
        async def not_found() -> Response:
            raise NotFound(f"No route matched: {ctx.method} {ctx.url.path}")

        return await compose(middleware)(ctx, not_found)

    ctx.params = match.params
    route = match.route
    chain = compose((*middleware, *route.middleware))
    return await chain(ctx, lambda: _call_handler(route.handler, ctx))


async def handle_request(
    ctx: RequestContext,
    *,
    router: Router,
    middleware: Sequence[Callable[..., Any]],
    config: AppConfig,
) -> Response:
    """Process a single request through the full pipeline.

    Never raises for errors inside the chain: they are translated into
    a JSON error response (or the custom hook's response).
    """
    token = context_var.set(ctx)
    try:
        try:
            response = await dispatch(ctx, router=router, middleware=middleware, config=config)
        except Exception as exc:
            response = await handle_error(exc, ctx, config.on_error)
    finally:
        context_var.reset(token)

    if ctx.method == "HEAD":
        response = _head_response(response)
    return response


def _head_response(response: Response) -> Response:
    """Drop the body but keep the headers GET would send (RFC 9110 §9.3.2).

    ``Content-Length`` is pinned to the GET body length before the body
    goes, so the sender does not advertise zero.
    """
    if body_allowed(response.status) and response.header("content-length") is None:
        response = response.with_header("Content-Length", str(len(response.body)))
    return response.without_body()
