"""
Models for responses of the GitHub contents and repository endpoints.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any


@dataclass
class ContentFile:
    """A file read through the contents API, with its body already decoded."""
    path: str
    sha: str
    content: bytes
    size: int = 0
    download_url: Optional[str] = None

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding)


@dataclass
class DirectoryItem:
    """One row of a contents API directory listing."""
    name: str
    path: str
    type: str
    sha: str
    size: int = 0

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DirectoryItem':
        return cls(
            name=data["name"],
            path=data["path"],
            type=data.get("type", "file"),
            sha=data.get("sha", ""),
            size=data.get("size", 0)
        )


@dataclass
class RateLimitInfo:
    """GitHub API rate limit information."""
    limit: int
    remaining: int
    reset_time: datetime
    used: int


class ConnectionState(str, Enum):
    """Outcome of a connection check against the configured repository."""
    NOT_CONFIGURED = "not_configured"
    CONNECTED = "connected"
    NO_PERMISSION = "no_permission"
    REPO_NOT_FOUND = "repo_not_found"
    AUTH_FAILED = "auth_failed"
    ERROR = "error"
    NETWORK_ERROR = "network_error"


CONNECTION_LABELS = {
    ConnectionState.NOT_CONFIGURED: "Not connected",
    ConnectionState.CONNECTED: "Connected",
    ConnectionState.NO_PERMISSION: "Insufficient permissions",
    ConnectionState.REPO_NOT_FOUND: "Repository not found",
    ConnectionState.AUTH_FAILED: "Authentication error",
    ConnectionState.ERROR: "Error",
    ConnectionState.NETWORK_ERROR: "Network error",
}


@dataclass
class ConnectionStatus:
    """Connection check result with a short label and an optional message."""
    state: ConnectionState
    status_code: Optional[int] = None
    message: Optional[str] = None
    permissions: Dict[str, bool] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def label(self) -> str:
        label = CONNECTION_LABELS[self.state]
        if self.state is ConnectionState.ERROR and self.status_code is not None:
            return f"{label}: {self.status_code}"
        return label
