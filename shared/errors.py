"""
Shared error handling for the Employee Access Layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var

UPSTREAM_UNAVAILABLE_MESSAGE = "Service temporarily unavailable"


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Access Layer services."""

    status_code: int = 500

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


class NotFoundError(AccessLayerException):
    """Subject id or name is absent upstream."""

    status_code = 404

    def __init__(self, subject: str, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.subject = subject
        super().__init__("NOT_FOUND", message or f"Employee not found: {subject}", details)


class InvalidArgumentError(AccessLayerException):
    """Malformed caller input."""

    status_code = 400

    def __init__(self, message: str = "Invalid argument", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ARGUMENT", message, details)


class UpstreamUnavailableError(AccessLayerException):
    """Upstream unreachable or returned an unusable success payload."""

    status_code = 503

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("UPSTREAM_UNAVAILABLE", f"{service}: {message}", details)

    def to_response(self) -> ErrorResponse:
        """Public response; upstream message and details stay in the logs."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=UPSTREAM_UNAVAILABLE_MESSAGE
        )


class RateLimitError(AccessLayerException):
    """Rate limiting errors."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMITED", message, details)


class ServiceError(AccessLayerException):
    """Service-related errors."""

    status_code = 500

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)
