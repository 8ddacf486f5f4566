"""
Shared request plumbing for Gateway adapters.
"""

from typing import Any, Dict, Optional

import httpx

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.errors import DeadlineExceededError, ServiceUnavailableError, error_from_payload


class DownstreamClient:
    """JSON-over-HTTP client for one internal service. No retries."""

    service_name = "downstream"

    def __init__(self, base_url: str, timeout: float = 10.0,
                 metrics: Optional[MetricsCollector] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger(f"gateway.{self.service_name}_client")

    async def _post(self, operation: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded body.

        Error bodies are turned back into the exception the service raised;
        transport failures become ServiceUnavailableError and timeouts
        DeadlineExceededError.
        """
        try:
            if self.metrics:
                with self.metrics.time_operation(
                    "downstream_request_duration_seconds",
                    service=self.service_name,
                    operation=operation
                ):
                    response = await self._send(path, payload)
            else:
                response = await self._send(path, payload)
        except httpx.TimeoutException as e:
            self.logger.warning("Downstream call timed out", operation=operation)
            raise DeadlineExceededError(
                f"{self.service_name} service timed out",
                details={"operation": operation, "error": str(e)}
            )
        except httpx.HTTPError as e:
            self.logger.error("Downstream HTTP error", operation=operation, error=str(e))
            raise ServiceUnavailableError(self.service_name, details={"http_error": str(e)})

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success and isinstance(body, dict):
            return body

        self.logger.warning(
            "Downstream call failed",
            operation=operation,
            status_code=response.status_code
        )
        raise error_from_payload(self.service_name, response.status_code, body)

    async def _send(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(f"{self.base_url}{path}", json=payload)

    async def health(self) -> bool:
        """Return True when the service answers its health check."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False
