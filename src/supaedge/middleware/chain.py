"""Onion-model middleware composition.

``compose()`` turns an ordered middleware list into one callable. Each
call of the composed chain gets its own dispatch state, so one composed
chain can serve many requests concurrently.

Order within one request is exact: middleware run in list order on the
way in (before ``await next()``) and in reverse order on the way out.
Errors are not recovered here; they unwind through every pending
``await next()`` and out of the composed call.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

from supaedge._internal.invoke import invoke
from supaedge.errors import ChainError
from supaedge.http.response import Response

if TYPE_CHECKING:
    from supaedge.context import RequestContext


class _Dispatch:
    """Cursor over one run of a middleware chain.

    ``index`` is the highest position dispatched so far. Dispatching a
    position at or below it means some middleware called ``next()``
    twice.
    """

    __slots__ = ("ctx", "final", "index", "middleware")

    def __init__(
        self,
        middleware: Sequence[Callable[..., Any]],
        ctx: RequestContext,
        final: Callable[[], Any],
    ) -> None:
        self.middleware = middleware
        self.ctx = ctx
        self.final = final
        self.index = -1

    async def __call__(self, i: int) -> Response:
        if i <= self.index:
            msg = "next() called multiple times in the same middleware"
            raise ChainError(msg)
        self.index = i

        if i < len(self.middleware):
            return await invoke(self.middleware[i], self.ctx, partial(self, i + 1))
        return await invoke(self.final)


class Composed:
    """A middleware list composed into a single callable.

    Usage::

        chain = compose([cors, logger])
        response = await chain(ctx, lambda: handler(ctx))
    """

    __slots__ = ("middleware",)

    def __init__(self, middleware: Sequence[Callable[..., Any]]) -> None:
        self.middleware = tuple(middleware)

    async def __call__(self, ctx: RequestContext, final: Callable[[], Any]) -> Response:
        """Run the chain over *ctx*, ending in the zero-argument *final*."""
        return await _Dispatch(self.middleware, ctx, final)(0)

    def __len__(self) -> int:
        return len(self.middleware)


def compose(middleware: Sequence[Callable[..., Any]]) -> Composed:
    """Compose *middleware* into one chain using the onion model."""
    return Composed(middleware)
