"""
Auth service client for Gateway.
"""

from typing import Any, Dict

from .base import DownstreamClient


class AuthClient(DownstreamClient):
    """Client for communicating with Auth service."""

    service_name = "auth"

    async def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        """Create a user account. Returns {user_id, message}."""
        return await self._post("register", "/auth/register", {
            "username": username,
            "email": email,
            "password": password
        })

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Exchange credentials for a token. Returns {token, user_id, username}."""
        return await self._post("login", "/auth/login", {
            "email": email,
            "password": password
        })

    async def validate_token(self, token: str) -> Dict[str, Any]:
        """Validate a bearer token. Returns {valid, user_id, username}."""
        result = await self._post("validate_token", "/auth/validate", {"token": token})
        if not result.get("valid"):
            self.logger.info("Token rejected by auth service")
        return result
