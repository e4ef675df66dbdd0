"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(ctx: RequestContext, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.

``next`` takes no arguments: the context is shared by the whole chain,
so middleware communicate by mutating it (``ctx.state``,
``ctx.response_headers``) rather than by passing a new request along.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, TypeAlias

from supaedge.http.response import Response

if TYPE_CHECKING:
    from supaedge.context import RequestContext

# The rest of the chain, handler included
Next: TypeAlias = Callable[[], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for supaedge middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(ctx: RequestContext, next: Next) -> Response:
            start = time.monotonic()
            response = await next()
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RequireJSON:
            async def __call__(self, ctx: RequestContext, next: Next) -> Response:
                ...

    A middleware calls ``next()`` at most once. It may run code before
    and after awaiting it, short-circuit by returning its own response,
    or raise to abort the request.
    """

    async def __call__(self, ctx: RequestContext, next: Next) -> Response: ...
