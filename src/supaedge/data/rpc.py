"""Typed remote-procedure calls against the data service.

Usage::

    class TotalParams(BaseModel):
        user_id: UUID

    get_total = define_rpc("get_total", params=TotalParams, returns=int)

    @app.get("/total", middleware=[AuthMiddleware()])
    async def total(ctx):
        value = await get_total.call(ctx, {"user_id": ctx.user.id})
        return ctx.respond.json({"total": value})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from supaedge._internal.validation import adapter_for, issues
from supaedge.data.client import run_client_call
from supaedge.errors import HTTPError

if TYPE_CHECKING:
    from supaedge.context import RequestContext


@dataclass(frozen=True, slots=True)
class RpcDefinition:
    """A named RPC with a parameter schema.

    ``returns`` documents the result type; results are not validated.
    """

    name: str
    params: Any
    returns: Any = Any

    async def call(self, ctx: RequestContext, params: Any) -> Any:
        """Call the RPC with the caller's (row-level-secured) client."""
        return await self._execute(ctx.supabase(), params)

    async def call_admin(self, ctx: RequestContext, params: Any) -> Any:
        """Call the RPC with the service-role client."""
        return await self._execute(ctx.supabase_admin(), params)

    async def _execute(self, client: Any, raw_params: Any) -> Any:
        adapter = adapter_for(self.params)
        try:
            parsed = adapter.validate_python(raw_params)
        except ValidationError as exc:
            raise HTTPError.bad_request(
                "RPC parameter validation failed",
                {"rpc": self.name, "issues": issues(exc)},
            ) from exc

        payload = adapter.dump_python(parsed, mode="json")
        try:
            result = await run_client_call(lambda: client.rpc(self.name, payload).execute())
        except Exception as exc:
            raise HTTPError.internal(
                "RPC call failed",
                {"rpc": self.name, "message": str(exc)},
            ) from exc

        return getattr(result, "data", result)


def define_rpc(name: str, *, params: Any, returns: Any = Any) -> RpcDefinition:
    """Define a typed RPC caller for the data-service function *name*."""
    return RpcDefinition(name=name, params=params, returns=returns)
