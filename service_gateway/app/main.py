"""
API Gateway service for TextTube.
"""

import time
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request
from starlette.middleware.base import BaseHTTPMiddleware

from shared.base_service import BaseService
from shared.config import ServiceConfig
from .adapters import AuthClient, VideoClient
from .domain import AuthMiddleware, VerifiedIdentity
from .models import LoginRequest, RegisterRequest

DEFAULT_MAX_RESULTS = 10


def parse_max_results(raw: Optional[str]) -> int:
    """Parse the max_results query value; anything non-numeric means the default."""
    if raw is None or raw == "":
        return DEFAULT_MAX_RESULTS
    try:
        return int(raw)
    except ValueError:
        return DEFAULT_MAX_RESULTS


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID, logs the request and echoes the ID back."""

    def __init__(self, app, observability_manager):
        super().__init__(app)
        self.observability = observability_manager

    async def dispatch(self, request: Request, call_next):
        request_id = self.observability.set_request_id(request.headers.get("X-Request-ID"))
        start_time = time.time()

        try:
            response = await call_next(request)

            self.observability.log_request(
                method=request.method,
                endpoint=str(request.url.path),
                status_code=response.status_code,
                duration=time.time() - start_time,
                request_id=request_id
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            self.observability.log_error(
                "request_error",
                str(e),
                method=request.method,
                endpoint=str(request.url.path),
                duration=time.time() - start_time,
                request_id=request_id
            )
            raise
        finally:
            self.observability.clear_request_context()


class GatewayService(BaseService):
    """API Gateway service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None,
                 auth_client: Optional[AuthClient] = None,
                 video_client: Optional[VideoClient] = None):
        super().__init__("gateway", 8080, config)

        timeout = self.config.downstream_timeout_seconds
        self.auth_client = auth_client or AuthClient(
            self.config.auth_service_url, timeout=timeout, metrics=self.metrics
        )
        self.video_client = video_client or VideoClient(
            self.config.video_service_url, timeout=timeout, metrics=self.metrics
        )
        self.auth_middleware = AuthMiddleware(self.auth_client, metrics=self.metrics)

        self._setup_gateway_routes()
        self._setup_video_routes()
        self.app.add_middleware(ObservabilityMiddleware, observability_manager=self.observability)

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    def _setup_gateway_routes(self):
        """Set up public auth routes and the profile route."""
        authenticate = self.auth_middleware.authenticate_request

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "gateway",
                "message": "TextTube - API Gateway",
                "version": "1.0.0"
            }

        @self.app.post("/api/auth/register", status_code=201)
        async def register(body: RegisterRequest):
            """Create an account. No token is issued; call login next."""
            result = await self.auth_client.register(body.username, body.email, body.password)
            self.observability.log_business_event("user_registered", user_id=result.get("user_id"))
            return result

        @self.app.post("/api/auth/login")
        async def login(body: LoginRequest):
            """Exchange credentials for a bearer token."""
            return await self.auth_client.login(body.email, body.password)

        @self.app.get("/api/profile")
        async def get_profile(identity: VerifiedIdentity = Depends(authenticate)):
            """Return the caller's verified identity."""
            return {
                "user_id": identity.user_id,
                "username": identity.username
            }

    def _setup_video_routes(self):
        """Set up protected video routes."""
        authenticate = self.auth_middleware.authenticate_request

        @self.app.get("/api/videos/search")
        async def search_channel(
            channel: Optional[str] = Query(None, description="Channel name or URL"),
            identity: VerifiedIdentity = Depends(authenticate),
        ):
            """Find a channel and its recent videos."""
            if not channel:
                raise HTTPException(status_code=400, detail="channel parameter is required")
            return await self.video_client.search_channel(channel, identity.user_id)

        @self.app.get("/api/videos/channel/{channel_id}")
        async def get_channel_videos(
            channel_id: str,
            max_results: Optional[str] = Query(None),
            identity: VerifiedIdentity = Depends(authenticate),
        ):
            """List a channel's recent videos."""
            return await self.video_client.get_channel_videos(
                channel_id,
                identity.user_id,
                parse_max_results(max_results)
            )

        @self.app.get("/api/videos/{video_id}")
        async def get_video_details(
            video_id: str,
            identity: VerifiedIdentity = Depends(authenticate),
        ):
            """Single video with statistics."""
            return await self.video_client.get_video_details(video_id, identity.user_id)

        @self.app.get("/api/videos/{video_id}/transcript")
        async def get_video_transcript(
            video_id: str,
            identity: VerifiedIdentity = Depends(authenticate),
        ):
            """Plain-text transcript for a video."""
            return await self.video_client.get_video_transcript(video_id, identity.user_id)

    async def _check_dependencies(self):
        """Check downstream services."""
        return {
            "auth": "ok" if await self.auth_client.health() else "error",
            "video": "ok" if await self.video_client.health() else "error"
        }


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = GatewayService(config)
    return service.app


if __name__ == "__main__":
    service = GatewayService()
    service.run()
