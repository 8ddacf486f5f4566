"""
Auth service for TextTube.
"""

from datetime import timedelta
from typing import Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import AuthenticationError
from .models import (
    RegisterRequest, RegisterResponse, LoginRequest, LoginResponse,
    TokenValidationRequest, TokenValidationResponse
)
from .service import AuthBoundary, CredentialStore
from .tokens import TokenIssuer, TokenSigningConfig
from .users import UserRepository


class AuthService(BaseService):
    """Auth service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None,
                 user_repository: Optional[CredentialStore] = None,
                 token_issuer: Optional[TokenIssuer] = None):
        super().__init__("auth", 8010, config)

        self.user_repository = user_repository or UserRepository(self.config.postgres_dsn)
        self.token_issuer = token_issuer or TokenIssuer(
            TokenSigningConfig(
                secret=self.config.jwt_secret,
                algorithm=self.config.jwt_algorithm,
                ttl=timedelta(hours=self.config.token_ttl_hours)
            )
        )
        self.auth = AuthBoundary(
            self.user_repository,
            self.token_issuer,
            bcrypt_rounds=self.config.bcrypt_rounds
        )

        @self.app.on_event("startup")
        async def _startup():
            await self.user_repository.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.user_repository.stop()

        self._setup_auth_routes()

    def _setup_auth_routes(self):
        """Set up auth-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "auth",
                "message": "TextTube - Auth Service",
                "version": "1.0.0"
            }

        @self.app.post("/auth/register", status_code=201, response_model=RegisterResponse)
        async def register(request: RegisterRequest):
            """Create a user account."""
            response = await self.auth.register(request.username, request.email, request.password)
            self.observability.log_business_event("user_registered", user_id=response.user_id)
            return response

        @self.app.post("/auth/login", response_model=LoginResponse)
        async def login(request: LoginRequest):
            """Exchange credentials for a bearer token."""
            try:
                response = await self.auth.login(request.email, request.password)
            except AuthenticationError:
                self.metrics.increment_counter("logins_total", status="rejected")
                raise

            self.metrics.increment_counter("logins_total", status="ok")
            self.observability.trace_request(user_id=response.user_id)
            self.observability.log_business_event("user_logged_in", user_id=response.user_id)
            return response

        @self.app.post("/auth/validate", response_model=TokenValidationResponse)
        async def validate_token(request: TokenValidationRequest):
            """Token validation endpoint. Invalid tokens yield valid=false, not an error."""
            response = self.auth.validate_token(request.token)
            self.metrics.increment_counter(
                "token_validations_total",
                status="valid" if response.valid else "invalid"
            )
            return response

    async def _check_dependencies(self):
        """Check auth dependencies."""
        healthy = await self.user_repository.health_check()
        return {"postgres": "ok" if healthy else "error"}


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = AuthService(config)
    return service.app


if __name__ == "__main__":
    service = AuthService()
    service.run()
