"""
Unit tests for AuthMiddleware.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi import HTTPException, Request

from service_gateway.app.domain.auth_middleware import AuthMiddleware, VerifiedIdentity
from shared.errors import DeadlineExceededError, ServiceUnavailableError
from shared.logging import user_id_var
from shared.metrics import MetricsCollector


class TestAuthMiddleware:
    """Test cases for AuthMiddleware."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("gateway")

    @pytest.fixture
    def auth_middleware(self, metrics):
        """Create AuthMiddleware instance."""
        mock_auth_client = AsyncMock()
        return AuthMiddleware(mock_auth_client, metrics=metrics)

    @pytest.fixture
    def mock_request(self):
        """Create mock request."""
        request = MagicMock(spec=Request)
        request.headers = {}
        return request

    def _rejections(self, metrics, reason):
        return metrics.registry.get_sample_value("auth_rejections_total", {"reason": reason})

    @pytest.mark.asyncio
    async def test_authenticate_request_success(self, auth_middleware, mock_request):
        """Test successful bearer authentication."""
        mock_request.headers = {"Authorization": "Bearer valid_token"}
        auth_middleware.auth_client.validate_token = AsyncMock(return_value={
            "valid": True,
            "user_id": "user-1",
            "username": "alice"
        })

        result = await auth_middleware.authenticate_request(mock_request)

        assert result == VerifiedIdentity(user_id="user-1", username="alice")
        auth_middleware.auth_client.validate_token.assert_called_once_with("valid_token")
        assert user_id_var.get() == "user-1"

    @pytest.mark.asyncio
    async def test_missing_header_never_calls_auth(self, auth_middleware, mock_request, metrics):
        """Missing credentials are rejected before any downstream call."""
        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
        auth_middleware.auth_client.validate_token.assert_not_called()
        assert self._rejections(metrics, "missing_header") == 1.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Bearer", "Bearer    ", "bearer token", "Token abc"])
    async def test_malformed_header_never_calls_auth(self, auth_middleware, mock_request, header):
        mock_request.headers = {"Authorization": header}

        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401
        auth_middleware.auth_client.validate_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_token(self, auth_middleware, mock_request, metrics):
        mock_request.headers = {"Authorization": "Bearer expired"}
        auth_middleware.auth_client.validate_token = AsyncMock(return_value={"valid": False})

        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token"
        assert self._rejections(metrics, "invalid_token") == 1.0

    @pytest.mark.asyncio
    async def test_valid_without_user_id_is_rejected(self, auth_middleware, mock_request):
        mock_request.headers = {"Authorization": "Bearer token"}
        auth_middleware.auth_client.validate_token = AsyncMock(return_value={"valid": True, "user_id": ""})

        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ServiceUnavailableError("auth"),
        DeadlineExceededError("auth service timed out"),
    ])
    async def test_auth_service_failure_is_unauthenticated(self, auth_middleware, mock_request, metrics, error):
        """Validation that cannot complete is treated as an invalid token."""
        mock_request.headers = {"Authorization": "Bearer token"}
        auth_middleware.auth_client.validate_token = AsyncMock(side_effect=error)

        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token"
        assert self._rejections(metrics, "auth_unavailable") == 1.0
