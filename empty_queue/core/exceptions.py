"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class EmptyQueueError(Exception):
    """Base exception for empty_queue."""

    code = "error"

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(EmptyQueueError):
    """Resource not found."""

    code = "not_found"


class ValidationError(EmptyQueueError):
    """Validation error (malformed or inverted time range, non-finite minutes)."""

    code = "validation_error"


class AuthorizationError(EmptyQueueError):
    """Authorization failed."""

    code = "forbidden"


class ForbiddenError(AuthorizationError):
    """Forbidden operation (task and block belong to different profiles)."""

    pass


class BusinessLogicError(EmptyQueueError):
    """Business logic constraint violation."""

    code = "business_rule"


class ConflictError(BusinessLogicError):
    """A deep block instance is already occupied for the requested date."""

    code = "conflict"


class ResizeStateError(BusinessLogicError):
    """Resize interaction used out of order, or started while a commit is pending."""

    code = "resize_busy"


class InfrastructureError(EmptyQueueError):
    """Infrastructure-related error (DB, external services, etc.)."""

    code = "infrastructure_error"
