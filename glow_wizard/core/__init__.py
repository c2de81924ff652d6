from .security import (
    extract_bearer_token,
    verify_id_token,
    initialize_firebase
)

from .exceptions import (
    GlowWizardException,
    AuthenticationError,
    ValidationError,
    AccessibilityError,
    UpstreamError,
    RateLimitError,
    UpstreamTimeoutError,
    MalformedResponseError,
    ResourceNotFoundError,
    InternalError,
    ProfileStoreError,
    error_body
)

__all__ = [
    # Security
    "extract_bearer_token",
    "verify_id_token",
    "initialize_firebase",
    # Exceptions
    "GlowWizardException",
    "AuthenticationError",
    "ValidationError",
    "AccessibilityError",
    "UpstreamError",
    "RateLimitError",
    "UpstreamTimeoutError",
    "MalformedResponseError",
    "ResourceNotFoundError",
    "InternalError",
    "ProfileStoreError",
    "error_body"
]
