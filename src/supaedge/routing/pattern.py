"""Path pattern parsing and compilation.

Patterns use the ``URLPattern`` pathname syntax::

    /users               static
    /users/:id           named segment, matches one path segment
    /users/:id?          optional segment (the leading ``/`` is optional too)
    /files/:name(\\d+)    named segment with a custom regex
    /static/*            unnamed wildcard, captured as "0", "1", ...

Patterns are compiled once, at registration, into an anchored regex.
"""

import re
from dataclasses import dataclass

from supaedge.errors import ConfigurationError

# Default regex for a named segment without an explicit pattern
SEGMENT_PATTERN = r"[^/]+"

_TOKEN = re.compile(
    r":(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:\((?P<regex>[^)]*)\))?(?P<optional>\?)?|(?P<wildcard>\*)"
)
_FOREIGN_SYNTAX = re.compile(r"\{[^}]*\}|<[^>]*>")


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed token inside a path segment.

    Static:    ``users``      (kind="static", value="users")
    Param:     ``:id``        (kind="param", name="id", regex="[^/]+")
    Wildcard:  ``*``          (kind="wildcard", name="0")
    """

    kind: str
    value: str = ""
    name: str | None = None
    regex: str = SEGMENT_PATTERN
    optional: bool = False


def parse_path(path: str) -> list[list[PathSegment]]:
    """Parse a route path into per-segment token lists.

    The result has one list per ``/``-separated segment (the empty
    segment before the leading slash is dropped). Examples::

        "/users"      -> [[static "users"]]
        "/users/:id"  -> [[static "users"], [param "id"]]
        "/"           -> [[]]

    Raises ``ConfigurationError`` for ``{param}`` or ``<param>`` syntax,
    duplicate parameter names, or a path not starting with ``/``.
    """
    if not path.startswith("/"):
        msg = f"Route path must start with '/': {path!r}"
        raise ConfigurationError(msg)

    foreign = _FOREIGN_SYNTAX.search(path)
    if foreign:
        msg = (
            f"Route path {path!r} uses {foreign.group(0)!r}. "
            "Path parameters are written as ':param', not '{param}' or '<param>'."
        )
        raise ConfigurationError(msg)

    seen: set[str] = set()
    wildcards = 0
    parsed: list[list[PathSegment]] = []

    for part in path.split("/")[1:]:
        tokens: list[PathSegment] = []
        pos = 0
        for m in _TOKEN.finditer(part):
            if m.start() > pos:
                tokens.append(PathSegment(kind="static", value=part[pos : m.start()]))
            if m.group("wildcard"):
                tokens.append(PathSegment(kind="wildcard", name=str(wildcards), regex=".*"))
                wildcards += 1
            else:
                name = m.group("name")
                if name in seen:
                    msg = f"Duplicate path parameter {name!r} in {path!r}"
                    raise ConfigurationError(msg)
                seen.add(name)
                tokens.append(
                    PathSegment(
                        kind="param",
                        name=name,
                        regex=m.group("regex") or SEGMENT_PATTERN,
                        optional=bool(m.group("optional")),
                    )
                )
            pos = m.end()
        if pos < len(part):
            tokens.append(PathSegment(kind="static", value=part[pos:]))
        parsed.append(tokens)

    return parsed


def _group_name(token: PathSegment) -> str:
    # Wildcards are named "0", "1"... which are not valid group names
    if token.kind == "wildcard":
        return f"_w{token.name}"
    return f"p_{token.name}"


def _token_regex(token: PathSegment) -> str:
    if token.kind == "static":
        return re.escape(token.value)
    group = f"(?P<{_group_name(token)}>{token.regex})"
    if token.optional:
        return f"{group}?"
    return group


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled route path.

    ``match`` returns the captured parameters, or ``None`` when the path
    does not match structurally. Parameters that captured nothing (an
    absent optional segment) are omitted from the result.
    """

    source: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]

    def match(self, path: str) -> dict[str, str] | None:
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        params: dict[str, str] = {}
        for name in self.param_names:
            group = f"_w{name}" if name.isdigit() else f"p_{name}"
            value = m.group(group)
            if value is not None:
                params[name] = value
        return params


def compile_path(path: str) -> PathPattern:
    """Compile a route path into a ``PathPattern``."""
    segments = parse_path(path)
    pieces: list[str] = []
    names: list[str] = []

    for tokens in segments:
        for token in tokens:
            if token.name is not None:
                names.append(token.name)
        # A lone optional param makes the whole segment, slash included, optional
        if len(tokens) == 1 and tokens[0].kind == "param" and tokens[0].optional:
            token = tokens[0]
            pieces.append(f"(?:/(?P<{_group_name(token)}>{token.regex}))?")
            continue
        pieces.append("/" + "".join(_token_regex(t) for t in tokens))

    return PathPattern(source=path, regex=re.compile("".join(pieces)), param_names=tuple(names))
