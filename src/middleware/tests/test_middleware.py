"""Tests for auth, rate limiting and security headers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch
from uuid import UUID

import jwt as pyjwt
import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from src.config import Settings
from src.middleware.clerk_auth import ClerkAuthMiddleware
from src.middleware.rate_limit import RateLimitMiddleware
from src.middleware.security import SECURITY_HEADERS, SecurityHeadersMiddleware

LUNA_USER_ID = "7d3f6c1e-2a4b-4f8e-9c0d-1b2a3c4d5e6f"


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="postgresql://localhost/luna_test", rate_limit_per_minute=3)


def build_app(settings: Settings, *middleware) -> FastAPI:
    app = FastAPI()

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/v1/whoami")
    async def whoami(request: Request) -> dict:
        auth = getattr(request.state, "auth", None)
        if auth is None:
            return {"user_id": None, "luna_user_id": None}
        return {
            "user_id": auth.user_id,
            "luna_user_id": str(auth.luna_user_id) if auth.luna_user_id else None,
        }

    for cls, kwargs in middleware:
        app.add_middleware(cls, **kwargs)
    return app


@pytest.fixture
def auth_client(settings: Settings) -> TestClient:
    app = build_app(
        settings,
        (ClerkAuthMiddleware, {"settings": settings, "jwks_client": MagicMock()}),
    )
    return TestClient(app)


class TestClerkAuth:
    def test_public_path_skips_auth(self, auth_client: TestClient) -> None:
        assert auth_client.get("/health").status_code == 200

    def test_missing_header(self, auth_client: TestClient) -> None:
        response = auth_client.get("/api/v1/whoami")
        assert response.status_code == 401
        assert response.json() == {"detail": "Missing or invalid Authorization header"}

    def test_non_bearer_header(self, auth_client: TestClient) -> None:
        response = auth_client.get("/api/v1/whoami", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_valid_token_sets_context(self, auth_client: TestClient) -> None:
        claims = {"sub": "user_123", "luna_user_id": LUNA_USER_ID, "sid": "sess_1"}
        with patch.object(ClerkAuthMiddleware, "_decode", return_value=claims):
            response = auth_client.get(
                "/api/v1/whoami", headers={"Authorization": "Bearer token"}
            )
        assert response.status_code == 200
        assert response.json() == {"user_id": "user_123", "luna_user_id": LUNA_USER_ID}

    def test_malformed_luna_user_id_ignored(self, auth_client: TestClient) -> None:
        claims = {"sub": "user_123", "luna_user_id": "not-a-uuid"}
        with patch.object(ClerkAuthMiddleware, "_decode", return_value=claims):
            response = auth_client.get(
                "/api/v1/whoami", headers={"Authorization": "Bearer token"}
            )
        assert response.json()["luna_user_id"] is None

    def test_expired_token(self, auth_client: TestClient) -> None:
        with patch.object(
            ClerkAuthMiddleware, "_decode", side_effect=pyjwt.ExpiredSignatureError()
        ):
            response = auth_client.get(
                "/api/v1/whoami", headers={"Authorization": "Bearer token"}
            )
        assert response.status_code == 401
        assert response.json() == {"detail": "Token expired"}

    def test_invalid_token(self, auth_client: TestClient) -> None:
        with patch.object(
            ClerkAuthMiddleware, "_decode", side_effect=pyjwt.InvalidTokenError("bad")
        ):
            response = auth_client.get(
                "/api/v1/whoami", headers={"Authorization": "Bearer token"}
            )
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid token"}


class TestRateLimit:
    def test_limit_enforced(self, settings: Settings) -> None:
        client = TestClient(build_app(settings, (RateLimitMiddleware, {"settings": settings})))

        remaining = [
            client.get("/api/v1/whoami").headers["X-RateLimit-Remaining"] for _ in range(3)
        ]
        assert remaining == ["2", "1", "0"]

        blocked = client.get("/api/v1/whoami")
        assert blocked.status_code == 429
        assert int(blocked.headers["Retry-After"]) >= 1

    def test_health_exempt(self, settings: Settings) -> None:
        client = TestClient(build_app(settings, (RateLimitMiddleware, {"settings": settings})))
        for _ in range(5):
            assert client.get("/health").status_code == 200

    def test_client_key_prefers_user(self) -> None:
        request = MagicMock()
        request.state.auth = MagicMock(user_id="user_123")
        assert RateLimitMiddleware.client_key(request) == "user:user_123"

    def test_client_key_uses_forwarded_ip(self) -> None:
        request = MagicMock()
        request.state.auth = None
        request.headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
        assert RateLimitMiddleware.client_key(request) == "ip:203.0.113.7"


class TestSecurityHeaders:
    def test_headers_on_api_routes(self, settings: Settings) -> None:
        client = TestClient(build_app(settings, (SecurityHeadersMiddleware, {})))
        response = client.get("/api/v1/whoami")
        for header, value in SECURITY_HEADERS.items():
            assert response.headers[header] == value
        assert response.headers["Cache-Control"] == "no-store"

    def test_no_cache_header_outside_api(self, settings: Settings) -> None:
        client = TestClient(build_app(settings, (SecurityHeadersMiddleware, {})))
        response = client.get("/health")
        assert "Cache-Control" not in response.headers
        assert response.headers["X-Frame-Options"] == "DENY"


def test_auth_context_uuid_type(settings: Settings) -> None:
    captured = {}
    app = FastAPI()

    @app.get("/api/v1/capture")
    async def capture(request: Request) -> dict:
        captured["auth"] = request.state.auth
        return {}

    app.add_middleware(ClerkAuthMiddleware, settings=settings, jwks_client=MagicMock())
    with patch.object(
        ClerkAuthMiddleware, "_decode", return_value={"sub": "u", "luna_user_id": LUNA_USER_ID}
    ):
        TestClient(app).get("/api/v1/capture", headers={"Authorization": "Bearer t"})
    assert captured["auth"].luna_user_id == UUID(LUNA_USER_ID)
