"""
Data models for ghlink.
"""

from .entry import (
    LinkType, RegistryEntry, ShortLink, utc_timestamp, parse_timestamp,
    sort_newest_first
)
from .content import (
    ContentFile, DirectoryItem, RateLimitInfo, ConnectionState, ConnectionStatus
)

__all__ = [
    "LinkType",
    "RegistryEntry",
    "ShortLink",
    "utc_timestamp",
    "parse_timestamp",
    "sort_newest_first",
    "ContentFile",
    "DirectoryItem",
    "RateLimitInfo",
    "ConnectionState",
    "ConnectionStatus"
]
