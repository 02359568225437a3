"""
Rate Limiter - Fixed-window request counter per client key.

State is one record per client key: ``{count, reset_at_ms}``.

admit(key, now):
    1. No record, or ``now > reset_at_ms``: start a new window with
       ``count = 1`` and ``reset_at_ms = now + window_ms``. ADMIT.
    2. Otherwise ``count += 1``. ``count > max_requests`` is REJECT with
       ``retry_after_ms = reset_at_ms - now``; the window is not reset.
       Anything else is ADMIT.

The window is fixed, not sliding: up to twice the nominal rate can pass
across a window boundary.

sweep(now) drops every record whose window has expired. An expired record
behaves exactly like a missing one on the next admit, so sweeping can run
at any time without changing outcomes.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import asyncio
import logging
import math

from fastapi import FastAPI, Request

from ..services.models import now_ms
from .errors import error_response
from .schemas import ErrorCode

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at_ms: int
    retry_after_ms: Optional[int] = None

    @property
    def retry_after_seconds(self) -> Optional[int]:
        if self.retry_after_ms is None:
            return None
        return math.ceil(self.retry_after_ms / 1000)

    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at_ms / 1000)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers


@dataclass
class _Window:
    count: int
    reset_at_ms: int


class FixedWindowRateLimiter:
    """
    Per-key fixed-window counter.

    Usage:
        limiter = FixedWindowRateLimiter(window_ms=1000, max_requests=2)
        decision = limiter.admit("203.0.113.7")
        if not decision.allowed:
            ...
    """

    def __init__(
        self,
        window_ms: int,
        max_requests: int,
        clock: Callable[[], int] = now_ms,
    ):
        if window_ms <= 0 or max_requests <= 0:
            raise ValueError("window_ms and max_requests must be positive")
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def admit(self, key: str, now: Optional[int] = None) -> RateLimitDecision:
        now = self._clock() if now is None else now
        window = self._windows.get(key)
        if window is None or now > window.reset_at_ms:
            window = _Window(count=1, reset_at_ms=now + self.window_ms)
            self._windows[key] = window
        else:
            window.count += 1

        remaining = max(0, self.max_requests - window.count)
        if window.count > self.max_requests:
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=remaining,
                reset_at_ms=window.reset_at_ms,
                retry_after_ms=window.reset_at_ms - now,
            )
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=remaining,
            reset_at_ms=window.reset_at_ms,
        )

    def sweep(self, now: Optional[int] = None) -> int:
        """Remove expired windows; return how many were removed."""
        now = self._clock() if now is None else now
        expired = [key for key, window in self._windows.items() if now > window.reset_at_ms]
        for key in expired:
            del self._windows[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, key: str) -> bool:
        return key in self._windows


def client_key(request: Request) -> str:
    """First X-Forwarded-For hop, else X-Real-IP, else "anonymous"."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return "anonymous"


def install_rate_limit(app: FastAPI, limiter: FixedWindowRateLimiter, prefix: str = "/v1") -> None:
    """Apply the limiter to every path under ``prefix``."""

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        path = request.url.path
        if not (path == prefix or path.startswith(prefix + "/")):
            return await call_next(request)

        key = client_key(request)
        decision = limiter.admit(key)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s %s (retry in %ss)",
                key, request.method, path, decision.retry_after_seconds,
            )
            return error_response(
                request,
                429,
                ErrorCode.RATE_LIMIT_EXCEEDED.value,
                RATE_LIMIT_MESSAGE,
                headers=decision.headers(),
            )

        response = await call_next(request)
        response.headers.update(decision.headers())
        return response


async def sweep_periodically(limiter: FixedWindowRateLimiter, interval_seconds: float) -> None:
    """Background task: sweep expired windows until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = limiter.sweep()
        if removed:
            logger.debug("Rate limiter swept %d expired windows (%d active)", removed, len(limiter))
