"""
Error types, user-facing messages and retry helpers for ghlink.
"""

from .exceptions import (
    GhLinkError, ConfigurationError, MissingCredentialsError,
    ValidationError, InvalidURLError, InvalidSlugError, InvalidFileError,
    RegistryError, DuplicateSlugError, SlugNotFoundError,
    GitHubAPIError, AuthenticationError, NotFoundError, RepositoryNotFoundError,
    PermissionDeniedError, ConflictError, RateLimitError
)
from .error_handler import user_message, api_error_message, error_status_code
from .retry_decorator import retry, RetryConfig, backoff_delay

__all__ = [
    "GhLinkError",
    "ConfigurationError",
    "MissingCredentialsError",
    "ValidationError",
    "InvalidURLError",
    "InvalidSlugError",
    "InvalidFileError",
    "RegistryError",
    "DuplicateSlugError",
    "SlugNotFoundError",
    "GitHubAPIError",
    "AuthenticationError",
    "NotFoundError",
    "RepositoryNotFoundError",
    "PermissionDeniedError",
    "ConflictError",
    "RateLimitError",
    "user_message",
    "api_error_message",
    "error_status_code",
    "retry",
    "RetryConfig",
    "backoff_delay"
]
