"""
API Module - HTTP surface of the gateway.

Exposes the services through a versioned REST API:
1. Per-request identity from a bearer token
2. Fixed-window rate limiting under /v1
3. Schema validation of every request and response
4. A uniform error envelope with request ids
5. The legacy query/authQuery dispatchers

Handlers receive settings and services through dependencies; nothing is
held in module globals apart from the default ``app``.
"""

from .app import create_app
from .auth import Identity
from .errors import APIError
from .ratelimit import FixedWindowRateLimiter, RateLimitDecision

__all__ = [
    "create_app",
    "Identity",
    "APIError",
    "FixedWindowRateLimiter",
    "RateLimitDecision",
]
