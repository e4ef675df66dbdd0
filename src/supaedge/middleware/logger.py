"""Access logging middleware.

Logs one line per request on the ``supaedge.access`` logger::

    GET /todos 200 (12.3ms)
    POST /todos ERR (0.4ms)

The library never configures handlers; applications do.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from supaedge.http.response import Response
from supaedge.middleware.protocol import Next

if TYPE_CHECKING:
    from supaedge.context import RequestContext

logger = logging.getLogger("supaedge.access")


class LoggerMiddleware:
    """Log method, path, status, and elapsed time for every request.

    Errors raised further down the chain are logged as ``ERR`` and
    re-raised unchanged.
    """

    __slots__ = ("logger",)

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.logger = log or logger

    async def __call__(self, ctx: RequestContext, next: Next) -> Response:
        t0 = time.perf_counter()
        method = ctx.method
        path = ctx.url.path

        try:
            response = await next()
        except Exception:
            elapsed = (time.perf_counter() - t0) * 1000
            self.logger.error("%s %s ERR (%.1fms)", method, path, elapsed)
            raise

        elapsed = (time.perf_counter() - t0) * 1000
        self.logger.info("%s %s %d (%.1fms)", method, path, response.status, elapsed)
        return response
