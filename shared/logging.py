"""
Structured logging for TextTube services.

Every service logs JSON lines through structlog on top of the stdlib
handler. Request and user identifiers travel in contextvars so that
adapters, repositories and the provider client log them without having
them passed around. Credentials never reach the output: values under
sensitive keys are masked before rendering.
"""

import sys
import logging
import uuid
from contextvars import ContextVar
from typing import Any, Callable, Dict, Optional

import structlog

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

_CORRELATION_VARS = {
    "request_id": request_id_var,
    "user_id": user_id_var,
}

SENSITIVE_KEYS = frozenset({"password", "password_hash", "token", "authorization", "jwt_secret", "api_key"})
REDACTED = "***"

Processor = Callable[[Any, str, Dict[str, Any]], Dict[str, Any]]


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structlog JSON output for one service process."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            service_name_adder(service_name),
            add_correlation_context,
            redact_sensitive_values,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def service_name_adder(service_name: str) -> Processor:
    """Processor stamping every event with the owning service."""

    def add_service_name(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_name


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Copy request and user IDs from the current context into the event."""
    for key, var in _CORRELATION_VARS.items():
        value = var.get()
        if value and key not in event_dict:
            event_dict[key] = value
    return event_dict


def redact_sensitive_values(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask credentials, including one level down in dict values such as ``details``."""
    for key, value in event_dict.items():
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if str(k).lower() in SENSITIVE_KEYS else v
                for k, v in value.items()
            }
    return event_dict


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind the correlation ID for the current request, generating one if absent."""
    request_id = request_id or str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def set_user_context(user_id: Optional[str] = None):
    """Bind the verified user for the current request."""
    if user_id:
        user_id_var.set(user_id)


def clear_context():
    for var in _CORRELATION_VARS.values():
        var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
