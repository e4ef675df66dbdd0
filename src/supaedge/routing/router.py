"""Ordered router with compiled path patterns.

Routes are matched in registration order; the first route whose method
and pattern both match wins. There is no specificity scoring, so
overlapping patterns must be registered most-specific-first.
"""

from collections.abc import Callable, Iterable
from typing import Any
from urllib.parse import unquote, urlsplit

from supaedge.routing.pattern import compile_path
from supaedge.routing.route import Route, RouteMatch


def _request_path(url: str) -> str:
    """Extract the path from a full URL or a bare ``/path?query``."""
    return urlsplit(url).path or "/"


class Router:
    """Ordered route table.

    Usage::

        router = Router()
        router.add("GET", "/users/:id", show_user)
        router.compile()
        match = router.match("GET", "http://localhost/users/42")
        match.params  # {"id": "42"}
    """

    __slots__ = ("_base_path", "_compiled", "_routes")

    def __init__(self, base_path: str = "") -> None:
        self._base_path = base_path.rstrip("/")
        self._compiled = False
        self._routes: list[Route] = []

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, in match-priority order."""
        return tuple(self._routes)

    def add(
        self,
        method: str,
        path: str,
        handler: Callable[..., Any],
        *,
        middleware: Iterable[Callable[..., Any]] = (),
    ) -> Route:
        """Register a route. Must be called before compile().

        The pattern is compiled from ``base_path + path``.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        full_path = self._base_path + path
        route = Route(
            method=method.upper(),
            path=full_path,
            pattern=compile_path(full_path),
            handler=handler,
            middleware=tuple(middleware),
        )
        self._routes.append(route)
        return route

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, url: str) -> RouteMatch | None:
        """Match a request method and a full URL or bare ``/path?query``.

        The URL is split with ``urlsplit``, so the path must still be
        percent-encoded. Request dispatch uses ``match_path`` instead.
        """
        return self.match_path(method, _request_path(url))

    def match_path(self, method: str, path: str) -> RouteMatch | None:
        """Match a request method and a percent-encoded path.

        HEAD requests also match GET routes. Captured params are
        percent-decoded. Returns ``None`` when nothing matches; callers
        decide how to react.
        """
        method = method.upper()
        for route in self._routes:
            if not route.accepts(method):
                continue
            params = route.pattern.match(path)
            if params is not None:
                decoded = {name: unquote(value) for name, value in params.items()}
                return RouteMatch(route=route, params=decoded)
        return None
