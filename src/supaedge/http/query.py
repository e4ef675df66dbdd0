"""Query string access for ``ctx.url.query``."""

from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Read-only view over a query string.

    Lookup returns the first value seen for a key. Repeated keys
    (``?tag=a&tag=b``) keep every value in order for ``get_list``.
    Blank values (``?flag=``) are kept as empty strings.
    """

    __slots__ = ("_pairs", "_raw")

    def __init__(self, query_string: str = "") -> None:
        self._raw = query_string
        self._pairs: tuple[tuple[str, str], ...] = tuple(
            parse_qsl(query_string, keep_blank_values=True)
        )

    def _grouped(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for key, value in self._pairs:
            grouped.setdefault(key, []).append(value)
        return grouped

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._grouped())

    def __len__(self) -> int:
        return len(self._grouped())

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"

    def get_list(self, key: str) -> list[str]:
        return [value for name, value in self._pairs if name == key]

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """The first value for *key* as an int; *default* if absent or not numeric."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            return default

    def as_dict(self) -> dict[str, Any]:
        """Plain dict for validation: single values flatten to a string,
        repeated keys become a list in arrival order.
        """
        return {k: v[0] if len(v) == 1 else v for k, v in self._grouped().items()}
