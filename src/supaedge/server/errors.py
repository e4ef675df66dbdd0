"""Error translation for supaedge requests.

Maps HTTPError exceptions and unexpected failures to JSON Response
objects, using the app's custom error hook when one is configured.
Every error path yields exactly one response.
"""

import json
import logging
from typing import Any

from supaedge._internal.invoke import invoke
from supaedge._internal.types import ErrorHook
from supaedge.context import RequestContext
from supaedge.errors import HTTPError
from supaedge.http.response import Response

logger = logging.getLogger("supaedge.server")

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def _json_error(body: dict[str, Any], status: int, ctx: RequestContext) -> Response:
    """Serialize *body* with the context's outbound headers merged in."""
    headers = ctx.response_headers.copy()
    headers.set("Content-Type", "application/json")
    return Response(
        body=json.dumps(body, default=str).encode("utf-8"),
        status=status,
        headers=tuple(headers.multi_items()),
    )


def translate_error(exc: BaseException, ctx: RequestContext) -> Response:
    """Default translation of an exception into a JSON error response.

    - ``HTTPError``: ``{"error", "status", "details"?}`` with its status.
    - anything else: ``{"error": <message>, "status": 500}``; the
      exception is logged with its traceback.
    """
    if isinstance(exc, HTTPError):
        logger.debug("%d %s %s - %s", exc.status, ctx.method, ctx.url.path, exc.message)
        return _json_error(exc.to_dict(), exc.status, ctx)

    logger.error("Unhandled error: %s %s", ctx.method, ctx.url.path, exc_info=exc)
    message = str(exc) or INTERNAL_ERROR_MESSAGE
    return _json_error({"error": message, "status": 500}, 500, ctx)


async def handle_error(
    exc: Exception,
    ctx: RequestContext,
    on_error: ErrorHook | None = None,
) -> Response:
    """Translate *exc*, preferring the custom hook when configured.

    A hook that raises, or returns something other than a ``Response``,
    is logged and ignored in favor of ``translate_error``.
    """
    if on_error is not None:
        try:
            result = await invoke(on_error, exc, ctx)
        except Exception:
            logger.warning(
                "Error hook failed for %s %s; using default error response",
                ctx.method,
                ctx.url.path,
                exc_info=True,
            )
        else:
            if isinstance(result, Response):
                return result
            logger.warning(
                "Error hook returned %s, not a Response; using default error response",
                type(result).__name__,
            )

    return translate_error(exc, ctx)
