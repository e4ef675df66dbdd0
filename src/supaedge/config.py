"""App-wide settings, fixed once the app starts serving."""

from dataclasses import dataclass

from supaedge._internal.types import ErrorHook


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(base_path="/functions/v1/todos")
    """

    # Path prefix baked into every route pattern. When set, incoming
    # paths are matched as-is and no prefix auto-detection happens.
    base_path: str = ""

    # Platform prefix auto-stripped when base_path is empty: a request to
    # ``{function_prefix}/<function-name>/todos`` is routed as ``/todos``.
    function_prefix: str = "/functions/v1"

    # Custom error translation: ``(error, ctx) -> Response``, sync or async.
    # If it raises, the default JSON error response is used instead.
    on_error: ErrorHook | None = None
