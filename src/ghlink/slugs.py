"""
Slug sanitization and generation.
"""

import re
import secrets
import string
from typing import Optional

from .error_handling import InvalidSlugError

SLUG_ALPHABET = string.ascii_lowercase + string.digits
DEFAULT_SLUG_LENGTH = 6

_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_slug(text: str) -> str:
    """Drop every character that is not a letter, digit, hyphen or underscore."""
    return _DISALLOWED.sub("", (text or "").strip())


def is_valid_slug(text: str) -> bool:
    return bool(text) and sanitize_slug(text) == text


def generate_slug(length: int = DEFAULT_SLUG_LENGTH) -> str:
    """Random slug of lowercase letters and digits."""
    if length < 1:
        raise ValueError("slug length must be at least 1")
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def resolve_slug(requested: Optional[str], length: int = DEFAULT_SLUG_LENGTH) -> str:
    """
    Slug to use for a new link.

    An empty request gets a generated slug. Anything else is sanitized,
    and a request with no allowed characters at all is rejected rather
    than silently replaced.

    Raises:
        InvalidSlugError: If ``requested`` sanitizes to an empty string
    """
    if requested is None or not requested.strip():
        return generate_slug(length)

    slug = sanitize_slug(requested)
    if not slug:
        raise InvalidSlugError(f"Slug has no usable characters: {requested!r}", value=requested)
    return slug
