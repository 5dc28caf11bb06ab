"""
Base class for link registries stored in a GitHub repository.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..config import RegistryConfig
from ..github import GitHubClient
from ..models import RegistryEntry, sort_newest_first


class BaseRegistry(ABC):
    """
    Abstract base class for registries.

    A registry maps slugs to targets and persists the mapping in the
    repository behind ``client``. Writes are read-modify-write cycles
    guarded only by the sha the contents API hands out.
    """

    #: Name used in configuration (``registry.backend``)
    backend_name = ""

    def __init__(self, client: GitHubClient, config: RegistryConfig, base_url: str):
        """
        Initialize the registry.

        Args:
            client: Client bound to the backing repository
            config: Registry section of the app config
            base_url: Public URL the repository is served from
        """
        self.client = client
        self.config = config
        self.base_url = base_url.rstrip("/")
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def get(self, slug: str) -> Optional[RegistryEntry]:
        """Entry for ``slug``, or None."""

    def exists(self, slug: str) -> bool:
        return self.get(slug) is not None

    @abstractmethod
    def entries(self) -> List[RegistryEntry]:
        """All entries, in storage order."""

    def list_entries(self) -> List[RegistryEntry]:
        """All entries, newest first; entries without a timestamp last."""
        return sort_newest_first(self.entries())

    @abstractmethod
    def add_url(self, slug: str, target: str) -> RegistryEntry:
        """
        Register a redirect.

        Raises:
            DuplicateSlugError: If ``slug`` is already registered
        """

    @abstractmethod
    def add_pdf(self, slug: str, data: bytes, filename: str = "") -> RegistryEntry:
        """
        Upload a PDF and register it.

        Raises:
            DuplicateSlugError: If ``slug`` is already registered
        """

    @abstractmethod
    def delete(self, slug: str, purge: bool = False) -> RegistryEntry:
        """
        Remove a slug.

        Args:
            slug: Slug to remove
            purge: Also delete uploaded files that outlive the entry

        Raises:
            SlugNotFoundError: If ``slug`` is not registered
        """

    @abstractmethod
    def short_url(self, slug: str) -> str:
        """Public short URL of ``slug``."""
