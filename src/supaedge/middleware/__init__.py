"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(ctx: RequestContext, next: Next) -> Response

Built-in middleware:
    AuthMiddleware -- Bearer-token authentication via the data service
    CORSMiddleware -- Cross-Origin Resource Sharing with preflight handling
    LoggerMiddleware -- One access-log line per request
    RateLimitMiddleware -- In-memory fixed-window rate limiting
    ValidatorMiddleware -- pydantic validation of body, query, and params
"""

from supaedge.middleware.auth import AuthConfig, AuthMiddleware
from supaedge.middleware.chain import Composed, compose
from supaedge.middleware.cors import CORSConfig, CORSMiddleware
from supaedge.middleware.logger import LoggerMiddleware
from supaedge.middleware.protocol import Middleware, Next
from supaedge.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware
from supaedge.middleware.validator import ValidatorMiddleware

__all__ = [
    "AuthConfig",
    "AuthMiddleware",
    "CORSConfig",
    "CORSMiddleware",
    "Composed",
    "LoggerMiddleware",
    "Middleware",
    "Next",
    "RateLimitConfig",
    "RateLimitMiddleware",
    "ValidatorMiddleware",
    "compose",
]
