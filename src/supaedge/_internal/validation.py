"""pydantic helpers shared by the validator middleware and RPC definitions."""

import json
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError


@lru_cache(maxsize=256)
def adapter_for(schema: Any) -> TypeAdapter[Any]:
    """Return a (cached) ``TypeAdapter`` for *schema*.

    *schema* can be anything pydantic accepts: a ``BaseModel`` subclass,
    a dataclass, a ``TypedDict``, or a plain type such as ``list[int]``.
    """
    return TypeAdapter(schema)


def issues(exc: ValidationError) -> list[dict[str, Any]]:
    """JSON-safe list of validation issues (no docs URLs, no raw exceptions)."""
    return json.loads(exc.json(include_url=False))
