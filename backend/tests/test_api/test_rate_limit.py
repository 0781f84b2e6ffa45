"""
Tests for the rate limiter and token handling

Author: TM3
Date: 2025-10-17
"""
import pytest
from unittest.mock import patch

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from app.core.auth import create_access_token, decode_access_token, has_any_role, TokenUser
from app.core.rate_limit import RateLimiter, RateLimitMiddleware


class TestRateLimiter:

    def test_allows_until_limit(self):
        limiter = RateLimiter()

        results = [limiter.is_allowed("ip:1", max_requests=3) for _ in range(4)]

        assert [r[0] for r in results] == [True, True, True, False]
        assert results[0][1] == 2
        assert results[3][2] >= 1

    def test_identifiers_are_independent(self):
        limiter = RateLimiter()
        limiter.is_allowed("ip:1", max_requests=1)

        assert limiter.is_allowed("ip:2", max_requests=1)[0] is True

    def test_window_expiry(self):
        limiter = RateLimiter()
        with patch('app.core.rate_limit.time.time', return_value=1000.0):
            limiter.is_allowed("ip:1", max_requests=1, window_seconds=60)
        with patch('app.core.rate_limit.time.time', return_value=1061.0):
            assert limiter.is_allowed("ip:1", max_requests=1, window_seconds=60)[0] is True

    def test_reset(self):
        limiter = RateLimiter()
        limiter.is_allowed("ip:1", max_requests=1)
        limiter.reset()
        assert limiter.is_allowed("ip:1", max_requests=1)[0] is True


class TestRateLimitMiddleware:

    @pytest.fixture
    def limited_client(self):
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, limiter=RateLimiter())

        @app.get("/api/v1/ping")
        async def ping():
            return {"pong": True}

        @app.get("/health")
        async def health():
            return {"status": "healthy"}

        with patch.dict('app.core.rate_limit.RATE_LIMITS', {"unauthenticated": 2, "authenticated": 5}):
            yield TestClient(app)

    def test_returns_429_with_retry_after(self, limited_client):
        assert limited_client.get("/api/v1/ping").headers["X-RateLimit-Remaining"] == "1"
        limited_client.get("/api/v1/ping")

        response = limited_client.get("/api/v1/ping")

        assert response.status_code == 429
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert int(response.headers["Retry-After"]) >= 1

    def test_tokens_get_the_authenticated_limit(self, limited_client):
        headers = {"Authorization": "Bearer abc"}
        response = limited_client.get("/api/v1/ping", headers=headers)
        assert response.headers["X-RateLimit-Limit"] == "5"

    def test_health_is_exempt(self, limited_client):
        for _ in range(5):
            assert limited_client.get("/health").status_code == 200


class TestTokens:

    def test_round_trip_claims(self):
        token = create_access_token(user_id=3, email="a@example.com", role="factory", factory_id=9)
        payload = decode_access_token(token)

        assert payload["sub"] == "3"
        assert payload["factory_id"] == 9
        assert payload["exp"] > payload["iat"]

    def test_expired_token(self):
        token = create_access_token(user_id=3, email="a@example.com", role="user", expires_minutes=-1)

        with pytest.raises(HTTPException) as exc:
            decode_access_token(token)

        assert exc.value.status_code == 401
        assert exc.value.detail == "Token has expired"

    def test_supervisor_counts_as_admin(self):
        supervisor = TokenUser(id=1, email="s@example.com", role="supervisor")

        assert has_any_role(supervisor, ("admin",))
        assert not has_any_role(supervisor, ("fitter",))
        assert supervisor.is_staff
