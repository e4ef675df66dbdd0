"""Invoke helpers — call sync or async callables uniformly.

Middleware, handlers, and error hooks can be ``def`` or ``async def``.
Any code that calls a user-provided callable must handle both cases.
This module provides a single helper so the sync/async check lives in
exactly one place.

Usage::

    from supaedge._internal.invoke import invoke

    response = await invoke(handler, ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables, and with sync callables
    that return an awaitable (a middleware returning ``next()``
    without awaiting it)::

        def passthrough(ctx, next):
            return next()

        async def timed(ctx, next):
            response = await next()
            return response.with_header("X-Done", "1")
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
