"""
Shared error handling for TextTube services.
"""

from typing import Dict, Any, Optional, Type

from pydantic import BaseModel

from .logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class TextTubeException(Exception):
    """Base exception for TextTube services."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(TextTubeException):
    """Bad or duplicate input."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class AuthenticationError(TextTubeException):
    """Credential or token rejection. Messages stay generic."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class NotFoundError(TextTubeException):
    """Entity absent upstream (unknown channel or video, no captions)."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class StorageError(TextTubeException):
    """Persistence layer failure."""

    status_code = 500

    def __init__(self, message: str = "Storage error", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORAGE_ERROR", message, details)


class UpstreamError(TextTubeException):
    """Non-success status or malformed response from the video provider."""

    status_code = 502

    def __init__(self, message: str = "Upstream error", details: Optional[Dict[str, Any]] = None):
        super().__init__("UPSTREAM_ERROR", message, details)


class ServiceUnavailableError(TextTubeException):
    """An internal service could not be reached."""

    status_code = 503

    def __init__(self, service: str, message: str = "Service unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_UNAVAILABLE", f"{service}: {message}", details)


class DeadlineExceededError(TextTubeException):
    """A downstream call did not complete within the request deadline."""

    status_code = 504

    def __init__(self, message: str = "Deadline exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__("DEADLINE_EXCEEDED", message, details)


_ERRORS_BY_CODE: Dict[str, Type[TextTubeException]] = {
    "VALIDATION_ERROR": ValidationError,
    "AUTHENTICATION_ERROR": AuthenticationError,
    "NOT_FOUND": NotFoundError,
    "STORAGE_ERROR": StorageError,
    "UPSTREAM_ERROR": UpstreamError,
    "DEADLINE_EXCEEDED": DeadlineExceededError,
}


def error_from_payload(service: str, status_code: int, payload: Any) -> TextTubeException:
    """Rebuild the exception a downstream service rendered into its error body."""
    if isinstance(payload, dict) and payload.get("code") in _ERRORS_BY_CODE:
        error_cls = _ERRORS_BY_CODE[payload["code"]]
        return error_cls(payload.get("message") or "", details=payload.get("details") or {})

    return ServiceUnavailableError(
        service,
        f"unexpected status {status_code}",
        details={"status_code": status_code}
    )
