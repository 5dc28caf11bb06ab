"""
Registry entry data model.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
import json


class LinkType(str, Enum):
    """What a short link points at."""
    URL = "url"
    PDF = "pdf"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix.

    Same form as JavaScript's ``Date.prototype.toISOString``, so entries
    written by web front ends sort together with ours.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; ``None`` if missing or malformed."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class RegistryEntry:
    """
    One slug -> target mapping.

    The slug is the key of the registry document, so ``to_dict`` leaves it
    out of the stored value.
    """

    slug: str
    target: str
    type: LinkType = LinkType.URL
    created: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.type, LinkType):
            self.type = LinkType(self.type)
        if self.created is None:
            self.created = utc_timestamp()

    @property
    def created_at(self) -> Optional[datetime]:
        return parse_timestamp(self.created)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "type": self.type.value,
            "created": self.created
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_dict(cls, slug: str, data: Dict[str, Any]) -> 'RegistryEntry':
        """
        Create an entry from a stored registry value.

        Unknown ``type`` values fall back to ``url``; a missing ``created``
        stays empty rather than being stamped with the current time.
        """
        raw_type = data.get("type", LinkType.URL.value)
        try:
            link_type = LinkType(raw_type)
        except ValueError:
            link_type = LinkType.URL

        return cls(
            slug=slug,
            target=str(data.get("target", "")),
            type=link_type,
            created=data.get("created") or ""
        )


@dataclass
class ShortLink:
    """Result of creating a link: the entry plus its public short URL."""
    slug: str
    short_url: str
    entry: RegistryEntry

    @property
    def target(self) -> str:
        return self.entry.target

    @property
    def type(self) -> LinkType:
        return self.entry.type


def sort_newest_first(entries):
    """Sort entries by ``created`` descending; undated entries go last."""
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        entries,
        key=lambda entry: (entry.created_at is not None, entry.created_at or epoch),
        reverse=True
    )
