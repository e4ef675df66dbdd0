"""supaedge — request dispatch for serverless edge functions.

Routes, onion-model middleware, a per-request context with lazily built
data-service clients, and JSON error translation, served over ASGI.

Basic usage::

    from supaedge import App

    app = App()

    @app.get("/hello/:name")
    async def hello(ctx):
        return ctx.respond.json({"message": f"Hello, {ctx.params['name']}!"})

Typed RPC calls (``pip install supaedge[supabase]``)::

    from supaedge import define_rpc
    get_total = define_rpc("get_total", params=TotalParams, returns=int)
    total = await get_total.call(ctx, {"user_id": ctx.user.id})
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ChainError",
    "ConfigurationError",
    "DataServiceEnv",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "RequestContext",
    "Response",
    "SupaEdgeError",
    "User",
    "define_rpc",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import supaedge`` fast while providing a clean top-level API.
    """
    if name == "App":
        from supaedge.app import App

        return App

    if name == "AppConfig":
        from supaedge.config import AppConfig

        return AppConfig

    if name == "Request":
        from supaedge.http.request import Request

        return Request

    if name == "Response":
        from supaedge.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from supaedge.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RequestContext", "User", "get_context"):
        from supaedge import context as _ctx

        return getattr(_ctx, name)

    if name in ("DataServiceEnv", "define_rpc"):
        from supaedge import data as _data

        return getattr(_data, name)

    if name in ("ChainError", "ConfigurationError", "HTTPError", "NotFound", "SupaEdgeError"):
        from supaedge import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
