"""Registered routes and match results."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from supaedge.routing.pattern import PathPattern

# Route method that matches every request method
ANY_METHOD = "ALL"


@dataclass(frozen=True, slots=True)
class Route:
    """One entry in the route table.

    ``middleware`` runs after the app's global middleware, in order, with
    the last entry closest to the handler.
    """

    method: str
    path: str
    pattern: PathPattern
    handler: Callable[..., Any]
    middleware: tuple[Callable[..., Any], ...] = ()

    def accepts(self, method: str) -> bool:
        """Whether a request with *method* may use this route.

        ``ALL`` routes take anything; GET routes also answer HEAD.
        """
        if self.method in (method, ANY_METHOD):
            return True
        return method == "HEAD" and self.method == "GET"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: Route
    params: dict[str, str]
