"""Default data-service client factory.

Builds a ``supabase`` client. The import is deferred so apps that never
touch the data service (or inject their own factory) don't need the
package installed. ``run_client_call`` keeps the sync client's blocking
HTTP off the event loop.
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

import anyio.to_thread

from supaedge.errors import ConfigurationError


async def run_client_call(call: Callable[[], Any]) -> Any:
    """Run one client call in a worker thread and return its result.

    Async clients return an awaitable from the call; it is awaited on
    the event loop.
    """
    result = await anyio.to_thread.run_sync(call)
    if inspect.isawaitable(result):
        result = await result
    return result


def create_supabase_client(url: str, key: str, headers: Mapping[str, str]) -> Any:
    """Create a Supabase client for *url* authenticated with *key*.

    *headers* are sent with every request the client makes (the
    caller's ``Authorization`` header for per-user clients).

    Raises ``ConfigurationError`` if ``supabase`` is not installed.
    """
    try:
        from supabase import ClientOptions, create_client
    except ImportError:
        msg = (
            "The data-service client requires the 'supabase' package. "
            "Install it with: pip install supaedge[supabase]"
        )
        raise ConfigurationError(msg) from None

    # An empty value would override the client's key-based Authorization
    extra = {name: value for name, value in headers.items() if value}
    if not extra:
        return create_client(url, key)
    return create_client(url, key, options=ClientOptions(headers=extra))
