"""supaedge application class.

Mutable during setup (route registration, middleware, error hook).
Frozen at runtime when ``handle()`` or ``__call__()`` is first invoked.
"""

import dataclasses
import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from supaedge._internal.asgi import Receive, Scope, Send
from supaedge._internal.types import ClientFactory, ErrorHook, Handler
from supaedge.config import AppConfig
from supaedge.context import RequestContext
from supaedge.data.env import DataServiceEnv
from supaedge.http.request import Request
from supaedge.http.response import Response
from supaedge.middleware.protocol import Middleware
from supaedge.routing.route import ANY_METHOD, Route
from supaedge.routing.router import Router
from supaedge.server.handler import handle_request
from supaedge.server.sender import send_response

logger = logging.getLogger("supaedge.server")


class App:
    """The supaedge application.

    Owns the global middleware list and the router. Usage::

        app = App()
        app.add_middleware(CORSMiddleware())

        @app.get("/todos/:id", middleware=[AuthMiddleware()])
        async def show(ctx):
            return ctx.respond.json({"id": ctx.params["id"]})

    ``app`` is an ASGI application; ``await app.handle(request)`` runs
    one request in-process.

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread freezes the app, even if several workers hit it at once.
    """

    __slots__ = (
        "_client_factory",
        "_env",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_router",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        client_factory: ClientFactory | None = None,
        env: DataServiceEnv | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router(self.config.base_path)
        self._middleware_list: list[Middleware] = []
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._client_factory = client_factory
        self._env = env
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Route registration --

    def add_route(
        self,
        method: str,
        path: str,
        handler: Handler,
        *,
        middleware: Iterable[Middleware] = (),
    ) -> Route:
        """Register *handler* for *method* and *path*.

        *middleware* runs after the global middleware, in order, with
        the last entry closest to the handler.
        """
        self._check_not_frozen()
        return self._router.add(method, path, handler, middleware=middleware)

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        middleware: Iterable[Middleware] = (),
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``:param`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``. A GET route
                also answers HEAD requests.
            middleware: Route-level middleware.
        """
        route_middleware = tuple(middleware)

        def decorator(func: Handler) -> Handler:
            for method in methods or ["GET"]:
                self.add_route(method, path, func, middleware=route_middleware)
            return func

        return decorator

    def get(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        """Register a GET (and HEAD) route via decorator."""
        return self.route(path, methods=["GET"], middleware=middleware)

    def post(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        """Register a POST route via decorator."""
        return self.route(path, methods=["POST"], middleware=middleware)

    def put(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        """Register a PUT route via decorator."""
        return self.route(path, methods=["PUT"], middleware=middleware)

    def patch(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        """Register a PATCH route via decorator."""
        return self.route(path, methods=["PATCH"], middleware=middleware)

    def delete(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        """Register a DELETE route via decorator."""
        return self.route(path, methods=["DELETE"], middleware=middleware)

    def all(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        """Register a route that answers every method via decorator."""
        return self.route(path, methods=[ANY_METHOD], middleware=middleware)

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._router.routes

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a global middleware. Runs for every request, matched or not."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Error hook --

    def error(self, func: ErrorHook) -> ErrorHook:
        """Register the custom error hook via decorator.

        The hook receives ``(error, ctx)`` and returns a Response. If it
        raises, the default JSON error response is used instead::

            @app.error
            def on_error(error, ctx):
                return ctx.respond.json({"oops": str(error)}, 500)
        """
        self._check_not_frozen()
        self.config = dataclasses.replace(self.config, on_error=func)
        return func

    # -- Request handling --

    def create_context(self, request: Request) -> RequestContext:
        """Build the per-request context, wiring in injected collaborators."""
        return RequestContext(request, client_factory=self._client_factory, env=self._env)

    async def handle(self, request: Request) -> Response:
        """Run one request through the app and return its Response.

        Work registered with ``ctx.wait_until`` has finished (or failed and
        been logged) by the time this returns.
        """
        response, ctx = await self._process(request)
        await self._run_background(ctx)
        return response

    async def _process(self, request: Request) -> tuple[Response, RequestContext]:
        self._ensure_frozen()
        ctx = self.create_context(request)
        response = await handle_request(
            ctx,
            router=self._router,
            middleware=self._middleware,
            config=self.config,
        )
        return response, ctx

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        response, ctx = await self._process(Request.from_asgi(scope, receive))
        await send_response(response, send)
        await self._run_background(ctx)

    async def _run_background(self, ctx: RequestContext) -> None:
        """Await work registered with ``ctx.wait_until``, logging failures."""
        for task in ctx.pending_tasks():
            try:
                await task
            except Exception:
                logger.exception("Background task failed: %s %s", ctx.method, ctx.url.path)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, before the first HTTP request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Capture middleware as an immutable tuple and lock the router.

        MUST only be called while holding _freeze_lock.
        """
        self._router.compile()
        self._middleware = tuple(self._middleware_list)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and error hooks before the first request."
            )
            raise RuntimeError(msg)
