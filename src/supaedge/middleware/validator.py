"""Schema validation of the body, query string and path params.

Schemas are anything pydantic can build a ``TypeAdapter`` for: a
``BaseModel`` subclass, a dataclass, a ``TypedDict``... Validated values
are stored in ``ctx.validated``; failures become 400 responses whose
``details`` carry the pydantic issues.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from supaedge._internal.validation import adapter_for, issues
from supaedge.errors import HTTPError
from supaedge.http.response import Response
from supaedge.middleware.protocol import Next

if TYPE_CHECKING:
    from supaedge.context import RequestContext


def _validate(schema: Any, value: Any, part: str) -> Any:
    try:
        return adapter_for(schema).validate_python(value)
    except ValidationError as exc:
        raise HTTPError.bad_request(f"Validation failed: {part}", {"issues": issues(exc)}) from exc


class ValidatorMiddleware:
    """Validate request parts against schemas, in body, query, params order.

    Usage::

        class NewTodo(BaseModel):
            title: str

        @app.post("/todos", middleware=[ValidatorMiddleware(body=NewTodo)])
        async def create(ctx):
            todo = ctx.validated.body
            ...

    Repeated query keys are passed to the schema as lists.
    """

    __slots__ = ("body", "params", "query")

    def __init__(self, *, body: Any = None, query: Any = None, params: Any = None) -> None:
        self.body = body
        self.query = query
        self.params = params

    async def __call__(self, ctx: RequestContext, next: Next) -> Response:
        if self.body is not None:
            try:
                raw = await ctx.json()
            except ValueError as exc:
                raise HTTPError.bad_request("Invalid JSON body") from exc
            ctx.validated.body = _validate(self.body, raw, "body")

        if self.query is not None:
            ctx.validated.query = _validate(self.query, ctx.url.query.as_dict(), "query")

        if self.params is not None:
            ctx.validated.params = _validate(self.params, dict(ctx.params), "params")

        return await next()
