"""
GitHub REST API access for ghlink.
"""

from .client import GitHubClient, classify_error
from .contents import encode_content, decode_content

__all__ = [
    "GitHubClient",
    "classify_error",
    "encode_content",
    "decode_content"
]
