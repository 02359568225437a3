"""
Tests for the fixed-window rate limiter.

Tests:
- Admission sequence within and across windows
- Sweeping expired windows
- Response headers
- HTTP middleware (429 envelope, /health exempt)
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.ratelimit import FixedWindowRateLimiter, RateLimitDecision
from ..config import Settings
from ..services.registry import build_mock_registry


class TestFixedWindow:
    """Admission decisions with an explicit clock."""

    @pytest.fixture
    def limiter(self):
        return FixedWindowRateLimiter(window_ms=1000, max_requests=2, clock=lambda: 0)

    def test_documented_sequence(self, limiter):
        """Two admits, a reject with the time left, then a fresh window."""
        first = limiter.admit("k", now=0)
        assert first.allowed and first.remaining == 1

        second = limiter.admit("k", now=100)
        assert second.allowed and second.remaining == 0

        third = limiter.admit("k", now=200)
        assert not third.allowed
        assert third.retry_after_ms == 800
        assert third.remaining == 0

        fourth = limiter.admit("k", now=1001)
        assert fourth.allowed
        assert fourth.remaining == 1
        assert fourth.reset_at_ms == 2001

    def test_reject_does_not_extend_window(self, limiter):
        """Rejected calls keep the original reset time."""
        for t in (0, 10, 20, 30):
            limiter.admit("k", now=t)
        decision = limiter.admit("k", now=40)
        assert decision.reset_at_ms == 1000
        assert decision.retry_after_ms == 960

    def test_boundary_is_inclusive(self, limiter):
        """A call exactly at the reset time still counts in the old window."""
        limiter.admit("k", now=0)
        limiter.admit("k", now=1)
        assert not limiter.admit("k", now=1000).allowed
        assert limiter.admit("k", now=1001).allowed

    def test_keys_are_independent(self, limiter):
        """Exhausting one key leaves another untouched."""
        for t in (0, 1, 2):
            limiter.admit("a", now=t)
        assert limiter.admit("b", now=3).remaining == 1

    def test_invalid_configuration(self):
        """Window and limit must be positive."""
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(window_ms=0, max_requests=1)
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(window_ms=1000, max_requests=0)


class TestSweep:
    """Expired windows are removed; live windows are kept."""

    def test_sweep_removes_only_expired(self):
        """Sweep keeps windows whose reset time has not passed."""
        limiter = FixedWindowRateLimiter(window_ms=1000, max_requests=5)
        limiter.admit("old", now=0)
        limiter.admit("new", now=500)

        assert limiter.sweep(now=1001) == 1
        assert "old" not in limiter
        assert "new" in limiter
        assert len(limiter) == 1

    def test_sweep_at_reset_time_keeps_window(self):
        """A window is expired only strictly after its reset time."""
        limiter = FixedWindowRateLimiter(window_ms=1000, max_requests=5)
        limiter.admit("k", now=0)
        assert limiter.sweep(now=1000) == 0
        assert "k" in limiter

    def test_sweep_does_not_change_outcomes(self):
        """An expired record behaves the same whether swept or not."""
        swept = FixedWindowRateLimiter(window_ms=1000, max_requests=1)
        kept = FixedWindowRateLimiter(window_ms=1000, max_requests=1)
        for limiter in (swept, kept):
            limiter.admit("k", now=0)
        swept.sweep(now=1500)

        assert swept.admit("k", now=1500) == kept.admit("k", now=1500)


class TestDecisionHeaders:

    def test_admit_headers(self):
        """Admitted requests report limit, remaining and reset in seconds."""
        decision = RateLimitDecision(allowed=True, limit=100, remaining=99, reset_at_ms=1500)
        assert decision.headers() == {
            "X-RateLimit-Limit": "100",
            "X-RateLimit-Remaining": "99",
            "X-RateLimit-Reset": "2",
        }

    def test_reject_headers(self):
        """Rejected requests add Retry-After rounded up to whole seconds."""
        decision = RateLimitDecision(
            allowed=False, limit=2, remaining=0, reset_at_ms=1000, retry_after_ms=800
        )
        headers = decision.headers()
        assert headers["Retry-After"] == "1"
        assert decision.retry_after_seconds == 1


class TestRateLimitMiddleware:
    """The limiter applied to /v1 over HTTP."""

    @pytest.fixture
    def client(self):
        settings = Settings(rate_limit_max=2, rate_limit_window_ms=60_000)
        app = create_app(settings=settings, registry=build_mock_registry())
        with TestClient(app) as test_client:
            yield test_client

    def test_third_request_is_rejected(self, client):
        """The request over the limit gets 429 with the error envelope."""
        headers = {"X-Forwarded-For": "203.0.113.7"}
        assert client.get("/v1/games", headers=headers).status_code == 200
        second = client.get("/v1/games", headers=headers)
        assert second.headers["X-RateLimit-Remaining"] == "0"

        third = client.get("/v1/games", headers=headers)
        assert third.status_code == 429
        body = third.json()
        assert body["error"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert "Retry-After" in third.headers
        assert body["requestId"] == third.headers["x-request-id"]

    def test_clients_are_counted_separately(self, client):
        """Different forwarded addresses have separate windows."""
        for _ in range(3):
            client.get("/v1/games", headers={"X-Forwarded-For": "198.51.100.1"})
        response = client.get("/v1/games", headers={"X-Forwarded-For": "198.51.100.2, 10.0.0.1"})
        assert response.status_code == 200
        assert response.headers["X-RateLimit-Remaining"] == "1"

    def test_health_is_not_limited(self, client):
        """Only /v1 paths are counted."""
        for _ in range(5):
            response = client.get("/health")
            assert response.status_code == 200
            assert "X-RateLimit-Limit" not in response.headers
