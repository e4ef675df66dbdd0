"""In-memory fixed-window rate limiting.

Counters live in process memory, so every worker (and every function
instance) keeps its own store. Limits are best-effort; use an external
store with a custom middleware when they must hold across instances.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from supaedge.errors import HTTPError
from supaedge.http.response import Response
from supaedge.middleware.protocol import Next

if TYPE_CHECKING:
    from supaedge.context import RequestContext


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """Rate limit configuration.

    ``key`` maps a context to the bucket it counts against. By default
    the client address from ``X-Forwarded-For`` or ``X-Real-IP`` is
    used, falling back to ``"unknown"``.
    """

    max: int = 100
    window_seconds: float = 60.0
    key: Callable[[RequestContext], str] | None = None


@dataclass(slots=True)
class _Window:
    count: int
    reset_at: float


def default_key(ctx: RequestContext) -> str:
    return ctx.headers.get("x-forwarded-for") or ctx.headers.get("x-real-ip") or "unknown"


class RateLimitMiddleware:
    """Reject requests beyond ``max`` per key per window with a 429.

    Every counted request gets ``X-RateLimit-Limit``,
    ``X-RateLimit-Remaining`` and ``X-RateLimit-Reset`` (epoch seconds)
    in ``ctx.response_headers``, the rejection included.
    """

    __slots__ = ("_clock", "_last_cleanup", "_lock", "_store", "config")

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._store: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def _cleanup(self, now: float) -> None:
        """Drop expired windows, at most once per window. Caller holds the lock."""
        if now - self._last_cleanup < self.config.window_seconds:
            return
        self._last_cleanup = now
        expired = [k for k, w in self._store.items() if w.reset_at <= now]
        for k in expired:
            del self._store[k]

    def _hit(self, key: str) -> _Window:
        now = self._clock()
        with self._lock:
            self._cleanup(now)
            window = self._store.get(key)
            if window is None or window.reset_at <= now:
                window = _Window(count=0, reset_at=now + self.config.window_seconds)
                self._store[key] = window
            window.count += 1
            return _Window(count=window.count, reset_at=window.reset_at)

    async def __call__(self, ctx: RequestContext, next: Next) -> Response:
        cfg = self.config
        key = (cfg.key or default_key)(ctx)
        window = self._hit(key)

        headers = ctx.response_headers
        headers.set("X-RateLimit-Limit", str(cfg.max))
        headers.set("X-RateLimit-Remaining", str(max(0, cfg.max - window.count)))
        headers.set("X-RateLimit-Reset", str(math.ceil(window.reset_at)))

        if window.count > cfg.max:
            raise HTTPError.too_many_requests("Rate limit exceeded")

        return await next()
