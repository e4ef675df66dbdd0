"""supaedge exception hierarchy.

Shared across Router, App, context, and middleware so every module
raises and catches the same types.
"""

from __future__ import annotations

from typing import Any


class SupaEdgeError(Exception):
    """Base for all supaedge-specific errors."""


class ConfigurationError(SupaEdgeError):
    """Raised when configuration is invalid or incomplete.

    Missing environment variables and missing optional dependencies
    both surface as this error.
    """


class ChainError(SupaEdgeError, RuntimeError):
    """Raised when a middleware breaks the dispatch contract.

    The only contract violation detected today is calling ``next()``
    more than once from the same middleware frame.
    """


class HTTPError(SupaEdgeError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The app catches these
    and serializes them as ``{"error": ..., "status": ..., "details": ...}``
    with the carried status code.
    """

    def __init__(self, status: int, message: str = "", details: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.message:
            return f"{self.status}: {self.message}"
        return str(self.status)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready body for this error.

        ``details`` is only included when it was provided.
        """
        body: dict[str, Any] = {"error": self.message, "status": self.status}
        if self.details is not None:
            body["details"] = self.details
        return body

    # -- Factories --

    @classmethod
    def bad_request(cls, message: str = "Bad Request", details: Any = None) -> HTTPError:
        return cls(400, message, details)

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized", details: Any = None) -> HTTPError:
        return cls(401, message, details)

    @classmethod
    def forbidden(cls, message: str = "Forbidden", details: Any = None) -> HTTPError:
        return cls(403, message, details)

    @classmethod
    def not_found(cls, message: str = "Not Found", details: Any = None) -> HTTPError:
        return NotFound(message, details)

    @classmethod
    def method_not_allowed(
        cls, message: str = "Method Not Allowed", details: Any = None
    ) -> HTTPError:
        return cls(405, message, details)

    @classmethod
    def conflict(cls, message: str = "Conflict", details: Any = None) -> HTTPError:
        return cls(409, message, details)

    @classmethod
    def too_many_requests(
        cls, message: str = "Too Many Requests", details: Any = None
    ) -> HTTPError:
        return cls(429, message, details)

    @classmethod
    def internal(cls, message: str = "Internal Server Error", details: Any = None) -> HTTPError:
        return cls(500, message, details)


class NotFound(HTTPError):  # noqa: N818 conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, message: str = "Not Found", details: Any = None) -> None:
        super().__init__(404, message, details)
