"""
Auth boundary: register, login and token validation over the credential
store and the token issuer.
"""

import asyncio
import uuid
from typing import Protocol, Optional

from shared.logging import get_logger
from shared.errors import AuthenticationError, ValidationError
from .models import (
    User, RegisterResponse, LoginResponse, TokenValidationResponse
)
from .passwords import MAX_PASSWORD_BYTES, hash_password, verify_password
from .tokens import TokenIssuer

INVALID_CREDENTIALS = "invalid credentials"


class CredentialStore(Protocol):
    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def health_check(self) -> bool: ...

    async def create(self, user: User) -> User: ...

    async def find_by_email(self, email: str) -> Optional[User]: ...


class AuthBoundary:
    """Register/login/validate operations."""

    def __init__(self, users: CredentialStore, tokens: TokenIssuer, bcrypt_rounds: int = 10):
        self.users = users
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        self.logger = get_logger("auth.boundary")
        # Compared against when the email is unknown so both login failures cost the same.
        self._dummy_hash = hash_password("texttube-dummy-password", rounds=bcrypt_rounds)

    async def register(self, username: str, email: str, password: str) -> RegisterResponse:
        """Store a new user with a salted password hash. No token is issued."""
        username = username.strip()
        email = self._normalize_email(email)
        self._validate_registration(username, email, password)

        password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=password_hash
        )

        await self.users.create(user)

        self.logger.info("User registered", user_id=user.id)
        return RegisterResponse(user_id=user.id)

    async def login(self, email: str, password: str) -> LoginResponse:
        """Check credentials and issue a token.

        Unknown email and wrong password raise the same AuthenticationError.
        """
        user = await self.users.find_by_email(self._normalize_email(email))

        if user is None:
            await asyncio.to_thread(verify_password, password, self._dummy_hash)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = self.tokens.issue(user.id, user.username)
        self.logger.info("User logged in", user_id=user.id)

        return LoginResponse(token=token, user_id=user.id, username=user.username)

    def validate_token(self, token: str) -> TokenValidationResponse:
        """Validate a bearer token. A bad token is a normal outcome, never an error."""
        try:
            claims = self.tokens.decode(token)
        except AuthenticationError as e:
            self.logger.debug("Token rejected", reason=e.details.get("reason"))
            return TokenValidationResponse(valid=False)

        return TokenValidationResponse(valid=True, user_id=claims.sub, username=claims.username)

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def _validate_registration(username: str, email: str, password: str) -> None:
        if not username:
            raise ValidationError("username is required")
        local, _, domain = email.partition("@")
        if not local or not domain:
            raise ValidationError("a valid email is required")
        if not password:
            raise ValidationError("password is required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
