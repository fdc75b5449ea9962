"""
Shared error handling for the Catalog service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class CatalogException(Exception):
    """Base exception for Catalog service errors."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(CatalogException):
    """Malformed or missing required input."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class InvalidArgumentError(CatalogException):
    """A filter argument is outside its allowed domain."""

    status_code = 400

    def __init__(self, message: str = "Invalid argument", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ARGUMENT", message, details)


class InvalidRangeError(CatalogException):
    """A filter range is inverted (lower bound above upper bound)."""

    status_code = 400

    def __init__(self, message: str = "Invalid range", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_RANGE", message, details)


class NotFoundError(CatalogException):
    """No entity matches the requested identity."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class DependencyError(CatalogException):
    """Backing store, cache store or notification channel failure."""

    status_code = 503

    def __init__(self, dependency: str, message: str = "Dependency failure", details: Optional[Dict[str, Any]] = None):
        self.dependency = dependency
        super().__init__("DEPENDENCY_ERROR", f"{dependency}: {message}", details)
