"""Parsed request URL."""

from dataclasses import dataclass
from urllib.parse import urlsplit

from supaedge.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class URL:
    """An immutable, parsed URL.

    Only the parts a request handler reads are kept: scheme, host
    (with port), path, and raw query string.
    """

    scheme: str = "http"
    host: str = "localhost"
    path: str = "/"
    query_string: str = ""

    @classmethod
    def parse(cls, url: str) -> "URL":
        """Parse an absolute URL or a bare path (``/users?page=2``)."""
        parts = urlsplit(url)
        return cls(
            scheme=parts.scheme or "http",
            host=parts.netloc or "localhost",
            path=parts.path or "/",
            query_string=parts.query,
        )

    @property
    def query(self) -> QueryParams:
        """Parsed query string parameters."""
        return QueryParams(self.query_string)

    @property
    def origin(self) -> str:
        """``scheme://host``."""
        return f"{self.scheme}://{self.host}"

    def __str__(self) -> str:
        if self.query_string:
            return f"{self.origin}{self.path}?{self.query_string}"
        return f"{self.origin}{self.path}"
