"""
Authentication middleware for Gateway.

Every protected route depends on ``AuthMiddleware.authenticate_request``;
FastAPI resolves dependencies before the handler body runs, so no protected
handler executes for a request the auth service has not vouched for.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request, HTTPException

from shared.logging import get_logger, set_user_context
from shared.metrics import MetricsCollector
from shared.errors import TextTubeException
from ..adapters.auth_client import AuthClient

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity confirmed by the auth service for the current request."""
    user_id: str
    username: str


class AuthMiddleware:
    """Authentication middleware for Gateway."""

    def __init__(self, auth_client: AuthClient, metrics: Optional[MetricsCollector] = None):
        self.auth_client = auth_client
        self.metrics = metrics
        self.logger = get_logger("gateway.auth_middleware")

    def _reject(self, reason: str, detail: str) -> HTTPException:
        if self.metrics:
            self.metrics.increment_counter("auth_rejections_total", reason=reason)
        return HTTPException(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )

    async def authenticate_request(self, request: Request) -> VerifiedIdentity:
        """Authenticate incoming request with its bearer token."""
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            raise self._reject("missing_header", "Authorization header required")

        if not auth_header.startswith(BEARER_PREFIX):
            raise self._reject("malformed_header", "Invalid authorization format")

        token = auth_header[len(BEARER_PREFIX):].strip()
        if not token:
            raise self._reject("malformed_header", "Invalid authorization format")

        try:
            result = await self.auth_client.validate_token(token)
        except TextTubeException as e:
            self.logger.warning("Token validation call failed", error=e.message)
            raise self._reject("auth_unavailable", "Invalid token")

        user_id = result.get("user_id")
        username = result.get("username")
        if not result.get("valid") or not user_id:
            raise self._reject("invalid_token", "Invalid token")

        identity = VerifiedIdentity(user_id=user_id, username=username or "")
        set_user_context(identity.user_id)

        self.logger.info("Request authenticated", user_id=identity.user_id)
        return identity
