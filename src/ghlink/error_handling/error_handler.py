"""
Translation of errors into user-facing messages.
"""

import logging
from typing import Optional

from .exceptions import (
    GhLinkError, GitHubAPIError, AuthenticationError, RepositoryNotFoundError,
    NotFoundError, PermissionDeniedError, ConflictError, RateLimitError,
    DuplicateSlugError, SlugNotFoundError, MissingCredentialsError,
    InvalidURLError, InvalidSlugError, InvalidFileError
)

logger = logging.getLogger(__name__)


AUTH_FAILED_MESSAGE = "Authentication failed: the token is invalid. Please enter it again."
REPO_NOT_FOUND_MESSAGE = "Repository not found. Check the username and repository name."
NO_PERMISSION_MESSAGE = (
    "Connected, but the token has no write access. "
    "Check that the token has the 'repo' scope."
)
CONFLICT_MESSAGE = (
    "The registry was changed by someone else while it was being updated. "
    "Please try again."
)


def api_error_message(error: GitHubAPIError) -> str:
    """
    Build the message for a GitHub API error from its HTTP status.

    Args:
        error: API error

    Returns:
        User-facing text
    """
    if isinstance(error, RepositoryNotFoundError):
        return REPO_NOT_FOUND_MESSAGE
    if isinstance(error, AuthenticationError) or error.status_code == 401:
        return AUTH_FAILED_MESSAGE
    if isinstance(error, PermissionDeniedError):
        return NO_PERMISSION_MESSAGE
    if isinstance(error, ConflictError):
        return CONFLICT_MESSAGE
    if isinstance(error, RateLimitError):
        return "GitHub API rate limit exceeded. Please wait and try again."
    if isinstance(error, NotFoundError) or error.status_code == 404:
        return "Not Found"
    if error.status_code is None:
        return f"Network error: {error.message}"

    detail = error.api_message or error.message
    return f"GitHub API Error: {error.status_code} {detail}"


def user_message(error: Exception) -> str:
    """
    Translate any exception into text suitable for the end user.

    Args:
        error: Exception raised by a ghlink operation

    Returns:
        User-facing text
    """
    if isinstance(error, GitHubAPIError):
        return api_error_message(error)
    if isinstance(error, DuplicateSlugError):
        return f'"{error.slug}" is already in use. Please choose a different ID.'
    if isinstance(error, SlugNotFoundError):
        return f'"{error.slug}" does not exist.'
    if isinstance(error, MissingCredentialsError):
        return "GitHub settings are incomplete. Set a token, username and repository first."
    if isinstance(error, InvalidURLError):
        if not error.value:
            return "Please enter a URL."
        return "Please enter a valid URL."
    if isinstance(error, InvalidSlugError):
        return "The ID may only contain letters, digits, hyphens and underscores."
    if isinstance(error, InvalidFileError):
        return error.message
    if isinstance(error, GhLinkError):
        return error.message

    logger.debug("Unexpected error type %s", type(error).__name__)
    return str(error) or type(error).__name__


def error_status_code(error: Exception) -> Optional[int]:
    """Return the HTTP status attached to an error, if any."""
    if isinstance(error, GitHubAPIError):
        return error.status_code
    return None
