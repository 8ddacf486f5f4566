"""
Observability helpers for TextTube services.
Bundles request correlation, structured logs and metrics.
"""

from typing import Optional

from .logging import get_logger, set_request_id, set_user_context, clear_context
from .metrics import MetricsCollector


class ObservabilityManager:
    """Centralized observability manager for services."""

    def __init__(self, service_name: str, metrics: MetricsCollector):
        self.service_name = service_name
        self.metrics = metrics
        self.logger = get_logger(f"{service_name}.observability")

    def set_request_id(self, request_id: Optional[str] = None) -> str:
        """Assign (or generate) the correlation ID for the current request."""
        return set_request_id(request_id)

    def trace_request(self, request_id: Optional[str] = None, user_id: Optional[str] = None):
        """Set up request context for log correlation."""
        if request_id:
            set_request_id(request_id)
        if user_id:
            set_user_context(user_id)

    def clear_request_context(self):
        """Clear request context."""
        clear_context()

    def log_request(self, method: str, endpoint: str, status_code: int,
                    duration: float, **kwargs):
        """Log HTTP request with full context."""
        self.logger.info(
            "HTTP request completed",
            method=method,
            endpoint=endpoint,
            status_code=status_code,
            duration=duration,
            **kwargs
        )

    def log_error(self, error_type: str, error_message: str, **kwargs):
        """Log error with full context."""
        self.logger.error(
            "Error occurred",
            error_type=error_type,
            error_message=error_message,
            **kwargs
        )
        self.metrics.record_error(error_type)

    def log_business_event(self, event_type: str, **kwargs):
        """Log business event with full context."""
        self.logger.info(
            "Business event",
            event_type=event_type,
            **kwargs
        )
        self.metrics.record_business_event(event_type)


def get_observability_manager(service_name: str, metrics: MetricsCollector) -> ObservabilityManager:
    """Get an observability manager for a service."""
    return ObservabilityManager(service_name, metrics)
