"""
FastAPI skeleton shared by the gateway, auth and video services.

A subclass passes its name and default port, registers its own routes and
overrides ``_check_dependencies``. The base class owns the common surface:
``/health`` and ``/metrics``, request timing, and the rendering of
``TextTubeException`` into the JSON error body every service speaks.
"""

import os
import time
from typing import Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import get_metrics_collector
from shared.observability import get_observability_manager
from shared.errors import TextTubeException

VERSION = "1.0.0"
UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    """Route template for metric labels, e.g. ``/api/videos/{video_id}``.

    Unrouted paths share one label so probes for random URLs cannot blow up
    label cardinality.
    """
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class BaseService:
    """Common app wiring for TextTube services."""

    def __init__(self, service_name: str, port: int, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.port = port
        self.config = config or get_config(service_name, port)
        configure_logging(service_name, self.config.log_level)

        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)
        self.observability = get_observability_manager(service_name, self.metrics)
        self._start_time = time.time()

        self.app = FastAPI(
            title=f"TextTube {service_name.title()} Service",
            version=VERSION,
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url=None,
        )
        self._setup_middleware()
        self._setup_routes()
        self._setup_error_handlers()

    def _setup_middleware(self):
        # Browsers only talk to the gateway, and only in local development.
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.env == "local" else [],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @self.app.middleware("http")
        async def record_request(request: Request, call_next):
            start_time = time.time()
            response = await call_next(request)
            duration = time.time() - start_time

            self.metrics.record_http_request(
                method=request.method,
                endpoint=route_label(request),
                status_code=response.status_code,
                duration=duration
            )
            self.logger.debug(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2)
            )
            return response

    def _setup_routes(self):

        @self.app.get("/health")
        async def health_check():
            """Liveness plus dependency status; any failing dependency marks the service degraded."""
            try:
                dependencies = await self._check_dependencies()
            except Exception as e:
                self.logger.error("Health check failed", error=str(e))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={"service": self.service_name, "status": "error", "error": str(e)}
                )

            status = "degraded" if "error" in dependencies.values() else "ok"
            self.metrics.record_health_check(status)
            return {
                "service": self.service_name,
                "status": status,
                "uptime_seconds": round(time.time() - self._start_time, 3),
                "dependencies": dependencies,
                "version": VERSION,
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            return Response(
                content=generate_latest(self.metrics.registry),
                media_type=CONTENT_TYPE_LATEST
            )

    def _setup_error_handlers(self):

        @self.app.exception_handler(TextTubeException)
        async def texttube_exception_handler(request: Request, exc: TextTubeException):
            """Render the error body with the status the exception type carries."""
            log = self.logger.error if exc.status_code >= 500 else self.logger.warning
            log(
                "Request failed",
                code=exc.code,
                message=exc.message,
                details=exc.details,
                path=request.url.path
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": {}
                }
            )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Map of dependency name to "ok" or "error". Override in subclasses."""
        return {}

    def run(self):
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
