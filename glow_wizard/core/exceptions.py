from typing import Any, List, Optional

from fastapi import status


class GlowWizardException(Exception):
    """Base exception for the Glow Wizard API"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "", details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class AuthenticationError(GlowWizardException):
    """Raised when the bearer credential is missing or rejected"""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"


class ValidationError(GlowWizardException):
    """Raised when user-correctable input fails validation"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_REQUEST"

    def __init__(self, message: str = "Request validation failed", errors: Optional[List[Any]] = None):
        super().__init__(message, details=errors or [])
        self.errors = errors or []


class AccessibilityError(GlowWizardException):
    """Raised when a single photo cannot be probed; collected per photo, never surfaced to the caller"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "PHOTO_NOT_ACCESSIBLE"

    def __init__(self, error: str, message: str):
        super().__init__(message)
        self.error = error


class UpstreamError(GlowWizardException):
    """Raised when the recommendation model fails"""
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "API_ERROR"


class RateLimitError(UpstreamError):
    """Raised when the recommendation model rate-limits us"""
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "API_RATE_LIMIT"


class UpstreamTimeoutError(UpstreamError):
    """Raised when the recommendation model does not answer in time"""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "API_TIMEOUT"


class MalformedResponseError(UpstreamError):
    """Raised when the model answer cannot be parsed into recommendations"""
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "RESPONSE_PARSE_ERROR"


class ResourceNotFoundError(GlowWizardException):
    """Raised when requested resource doesn't exist"""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class InternalError(GlowWizardException):
    """Raised for unexpected failures"""
    pass


class ProfileStoreError(InternalError):
    """Raised when the profile document store cannot be read or written"""
    pass


def error_body(exc: GlowWizardException, include_message: bool = True) -> dict:
    body = {"error": exc.error_code}
    if include_message and exc.message:
        body["message"] = exc.message
    if exc.details:
        body["details"] = exc.details
    return body
