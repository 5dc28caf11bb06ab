"""
Base64 codec for contents API bodies.
"""

import base64
import binascii

from ..error_handling import GitHubAPIError


def encode_content(data: bytes) -> str:
    """Encode raw bytes for the ``content`` field of a PUT request."""
    return base64.b64encode(data).decode("ascii")


def decode_content(encoded: str) -> bytes:
    """
    Decode the ``content`` field of a GET response.

    GitHub wraps the base64 text at 60 columns, so line breaks are removed
    before strict decoding.
    """
    compact = "".join((encoded or "").split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise GitHubAPIError(f"Malformed base64 content: {e}", cause=e) from e
