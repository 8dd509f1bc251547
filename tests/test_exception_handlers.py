"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    RateLimitAppError,
    UpstreamAppError,
    ValidationAppError,
)
from app.core.exception_handlers import setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(code="invalid_steam_id", message="Missing or invalid steamid parameter")

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "invalid_steam_id"
        assert data["error"]["message"] == "Missing or invalid steamid parameter"
        assert "request_id" in data["error"]
        assert "details" not in data["error"]

    def test_authentication_error_returns_403(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-auth")
        async def test_endpoint():
            raise AuthenticationAppError(code="origin_not_allowed", message="Origin not allowed")

        assert client.get("/test-auth").status_code == 403

    def test_rate_limit_error_returns_429_with_retry_after(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate-limit")
        async def test_endpoint():
            raise RateLimitAppError(
                code="daily_limit_exceeded",
                message="Daily request limit reached. Try again tomorrow.",
                details={"reason": "daily_limit_exceeded", "retry_after": 120},
            )

        response = client.get("/test-rate-limit")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "120"
        assert response.json()["error"]["details"]["reason"] == "daily_limit_exceeded"

    def test_rate_limit_error_without_retry_after_has_no_header(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate-limit-bare")
        async def test_endpoint():
            raise RateLimitAppError(code="per_client_rate_exceeded", message="Too many requests.")

        response = client.get("/test-rate-limit-bare")

        assert response.status_code == 429
        assert "Retry-After" not in response.headers

    def test_base_app_error_defaults_to_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-base")
        async def test_endpoint():
            raise AppError(code="generic", message="Generic failure")

        assert client.get("/test-base").status_code == 400

    def test_upstream_error_has_no_dedicated_status(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-upstream")
        async def test_endpoint():
            raise UpstreamAppError(code="upstream_bad_status", message="Steam API returned HTTP 500")

        assert client.get("/test-upstream").status_code == 400


class TestGeneralExceptionHandler:
    def test_unexpected_error_returns_generic_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-boom")
        async def test_endpoint():
            raise RuntimeError("database password=hunter2")

        response = client.get("/test-boom")

        assert response.status_code == 500
        data = response.json()
        assert data["error"]["code"] == "internal_server_error"
        assert "hunter2" not in response.text
