"""Case-insensitive HTTP headers.

``Headers`` is the immutable view of inbound request headers. It stores
raw byte pairs from the ASGI scope and decodes them once, up front.

``MutableHeaders`` is the per-request outbound header set carried on the
context (``ctx.response_headers``). Middleware writes to it; every
response the context builds starts from a copy of it.
"""

from collections.abc import Iterable, Iterator, Mapping, MutableMapping


class Headers(Mapping[str, str]):
    """Read-only request headers with case-insensitive lookup.

    Values are decoded once, at construction. Lookup returns the first
    value for a name; ``get_list`` returns all of them in arrival order.
    """

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw
        index: dict[str, list[str]] = {}
        for name, value in raw:
            index.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._index = index

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str] | None = None) -> "Headers":
        """Build from a plain ``str -> str`` mapping (tests, direct use)."""
        pairs = (headers or {}).items()
        return cls(tuple((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in pairs))

    def __getitem__(self, key: str) -> str:
        values = self._index.get(key.lower())
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        return list(self._index.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The undecoded byte pairs, as received."""
        return self._raw


class MutableHeaders(MutableMapping[str, str]):
    """Mutable, case-insensitive header multiset.

    Names keep the casing they were first written with; lookups ignore
    case. ``set`` (and item assignment) replaces every value for a name,
    ``append`` adds another one. ``multi_items`` returns every pair in
    insertion order and is what gets written to the wire.
    """

    __slots__ = ("_items",)

    def __init__(
        self,
        headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._items: list[tuple[str, str]] = []
        if headers is None:
            return
        if isinstance(headers, MutableHeaders):
            self._items = headers.multi_items()
            return
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in pairs:
            self.append(name, value)

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower()
        for name, value in self._items:
            if name.lower() == key_lower:
                return value
        raise KeyError(key)

    def __setitem__(self, key: str, value: str) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        key_lower = key.lower()
        remaining = [(n, v) for n, v in self._items if n.lower() != key_lower]
        if len(remaining) == len(self._items):
            raise KeyError(key)
        self._items = remaining

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name.lower() == key_lower for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._items:
            key = name.lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        return f"MutableHeaders({self._items!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower()
        return [value for name, value in self._items if name.lower() == key_lower]

    def set(self, key: str, value: str) -> None:
        """Replace all values for *key* with a single *value*.

        The replacement keeps the position of the first existing entry.
        """
        key_lower = key.lower()
        result: list[tuple[str, str]] = []
        placed = False
        for name, existing in self._items:
            if name.lower() != key_lower:
                result.append((name, existing))
            elif not placed:
                result.append((name, value))
                placed = True
        if not placed:
            result.append((key, value))
        self._items = result

    def append(self, key: str, value: str) -> None:
        """Add *value* for *key* without touching existing values."""
        self._items.append((key, value))

    def multi_items(self) -> list[tuple[str, str]]:
        """Return every ``(name, value)`` pair, duplicates included."""
        return list(self._items)

    def copy(self) -> "MutableHeaders":
        """Return an independent copy."""
        return MutableHeaders(self)
