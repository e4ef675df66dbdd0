"""Shared type aliases used across supaedge modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Route handler: ``(ctx) -> Response``, sync or async
Handler: TypeAlias = Callable[..., Any]

# Custom error hook: ``(error, ctx) -> Response``, sync or async
ErrorHook: TypeAlias = Callable[..., Any]

# Data-service client factory: ``(url, key, headers) -> client``
ClientFactory: TypeAlias = Callable[[str, str, Mapping[str, str]], Any]
