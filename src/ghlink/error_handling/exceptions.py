"""
Custom exceptions for ghlink.
"""

from typing import Optional, Dict, Any


class GhLinkError(Exception):
    """
    Base exception for all ghlink errors.

    Carries an optional error code, a context dictionary and the original
    exception so callers can log or render errors uniformly.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize ghlink error.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        parts = [self.message]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


class ConfigurationError(GhLinkError):
    """Raised when configuration values are missing or invalid."""


class MissingCredentialsError(ConfigurationError):
    """Raised when an operation needs a token, username and repository."""

    def __init__(self, message: str = "GitHub token, username and repository must be configured", **kwargs):
        kwargs.setdefault("error_code", "missing_credentials")
        super().__init__(message, **kwargs)


class ValidationError(GhLinkError):
    """
    Exception for invalid user input.

    Raised before any network call is made, so nothing has been written
    to the repository when it surfaces.
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **kwargs):
        context = kwargs.get('context', {})
        if field:
            context['field'] = field
        if value is not None:
            context['value'] = value

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Raised when a target URL is empty or malformed."""

    def __init__(self, message: str, value: Any = None, **kwargs):
        kwargs.setdefault("error_code", "invalid_url")
        super().__init__(message, field="url", value=value, **kwargs)


class InvalidSlugError(ValidationError):
    """Raised when a requested slug has no usable characters."""

    def __init__(self, message: str, value: Any = None, **kwargs):
        kwargs.setdefault("error_code", "invalid_slug")
        super().__init__(message, field="slug", value=value, **kwargs)


class InvalidFileError(ValidationError):
    """Raised when an upload is missing, not a PDF, or too large."""

    def __init__(self, message: str, value: Any = None, **kwargs):
        kwargs.setdefault("error_code", "invalid_file")
        super().__init__(message, field="file", value=value, **kwargs)


class RegistryError(GhLinkError):
    """
    Exception for registry read/modify/write failures.

    Raised when the remote registry is unreadable or when a requested
    change conflicts with its current contents.
    """

    def __init__(self, message: str, slug: Optional[str] = None, path: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if slug:
            context['slug'] = slug
        if path:
            context['path'] = path

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.slug = slug
        self.path = path


class DuplicateSlugError(RegistryError):
    """Raised when a slug is already registered."""

    def __init__(self, slug: str, **kwargs):
        kwargs.setdefault("error_code", "duplicate_slug")
        super().__init__(f"Slug already in use: {slug}", slug=slug, **kwargs)


class SlugNotFoundError(RegistryError):
    """Raised when deleting or reading a slug that is not registered."""

    def __init__(self, slug: str, **kwargs):
        kwargs.setdefault("error_code", "slug_not_found")
        super().__init__(f"Slug not found: {slug}", slug=slug, **kwargs)


class GitHubAPIError(GhLinkError):
    """Exception for GitHub API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if status_code is not None:
            context['status_code'] = status_code

        kwargs['context'] = context
        kwargs.setdefault("error_code", "github_api")
        super().__init__(message, **kwargs)

        self.status_code = status_code
        self.response_data = response_data

    @property
    def api_message(self) -> Optional[str]:
        """The ``message`` field of GitHub's error body, if any."""
        if isinstance(self.response_data, dict):
            return self.response_data.get("message")
        return None


class AuthenticationError(GitHubAPIError):
    """HTTP 401: the token is missing, expired or revoked."""


class NotFoundError(GitHubAPIError):
    """HTTP 404 on an arbitrary endpoint."""


class RepositoryNotFoundError(NotFoundError):
    """The configured repository does not exist or is not visible to the token."""


class PermissionDeniedError(GitHubAPIError):
    """The token can read the repository but cannot push to it."""


class ConflictError(GitHubAPIError):
    """The file changed remotely since its sha was read."""


class RateLimitError(GitHubAPIError):
    """The API rate limit is exhausted."""
