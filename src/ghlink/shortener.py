"""
Short link service: input validation and dispatch to the configured registry.
"""

import json
import logging
import mimetypes
from pathlib import Path
from typing import List, Optional, Tuple, Union
from urllib.parse import urlparse

import requests

from .config import AppConfig, get_config
from .error_handling import (
    MissingCredentialsError, InvalidURLError, InvalidSlugError, InvalidFileError
)
from .github import GitHubClient
from .models import LinkType, RegistryEntry, ShortLink, ConnectionStatus
from .registry import BaseRegistry, create_registry
from .slugs import is_valid_slug, resolve_slug

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


def validate_url(url: Optional[str]) -> str:
    """
    Trim and check a target URL.

    Raises:
        InvalidURLError: If the URL is empty, or lacks a scheme or host
    """
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidURLError("URL is empty", value=candidate)

    parsed = urlparse(candidate)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidURLError(f"Not an absolute URL: {candidate}", value=candidate)
    return candidate


def format_file_size(size: int) -> str:
    """Human readable size: bytes below 1 KB, one decimal above."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class ShortenerService:
    """
    Creates, lists and deletes short links for the configured repository.

    The registry is built lazily so that settings-only operations (base URL,
    manual entries) work without credentials.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        client: Optional[GitHubClient] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the service.

        Args:
            config: Application configuration (global config if omitted)
            client: Pre-built GitHub client
            session: Session for a client built here
        """
        self.config = config or get_config()
        self.client = client or GitHubClient(self.config.github, session=session)
        self._registry: Optional[BaseRegistry] = None

    @property
    def has_credentials(self) -> bool:
        return self.config.github.has_credentials

    @property
    def base_url(self) -> str:
        """Public origin of the short links."""
        github = self.config.github
        if github.custom_domain:
            domain = github.custom_domain.strip().rstrip("/")
            if "://" in domain:
                domain = domain.split("://", 1)[1]
            return f"https://{domain}"
        return f"https://{github.username}.github.io/{github.repo}"

    @property
    def slug_prefix(self) -> str:
        return self.base_url[len("https://"):] + "/"

    @property
    def registry(self) -> BaseRegistry:
        if self._registry is None:
            self._registry = create_registry(self.client, self.config.registry, self.base_url)
        return self._registry

    def _require_credentials(self) -> None:
        if not self.has_credentials:
            raise MissingCredentialsError()

    def check_connection(self) -> ConnectionStatus:
        return self.client.check_connection()

    def short_url(self, slug: str) -> str:
        return self.registry.short_url(slug)

    def shorten_url(self, url: str, slug: Optional[str] = None) -> ShortLink:
        """
        Register a redirect to ``url``.

        Args:
            url: Target URL
            slug: Requested slug (random if empty)

        Raises:
            InvalidURLError: If ``url`` is not a usable absolute URL
            MissingCredentialsError: If no token/username/repository is set
            DuplicateSlugError: If the slug is taken
        """
        target = validate_url(url)
        slug = resolve_slug(slug, self.config.registry.slug_length)
        self._require_credentials()

        entry = self.registry.add_url(slug, target)
        return ShortLink(slug=slug, short_url=self.short_url(slug), entry=entry)

    def manual_entry(self, url: str, slug: Optional[str] = None) -> Tuple[str, str]:
        """
        Registry fragment for users without a token to paste by hand.

        Returns:
            Tuple of (slug, JSON fragment ending in a comma)
        """
        target = validate_url(url)
        slug = resolve_slug(slug, self.config.registry.slug_length)
        entry = RegistryEntry(slug=slug, target=target, type=LinkType.URL)
        fragment = f"{json.dumps(slug, ensure_ascii=False)}: {entry.to_json()},"
        return slug, fragment

    def validate_pdf(self, path: Union[str, Path]) -> Path:
        """
        Check that ``path`` is an existing PDF within the size limit.

        Raises:
            InvalidFileError: If any check fails
        """
        pdf_path = Path(path)
        if not pdf_path.is_file():
            raise InvalidFileError(f"File not found: {pdf_path}", value=str(pdf_path))

        mime_type, _ = mimetypes.guess_type(pdf_path.name)
        if mime_type != PDF_MIME_TYPE:
            raise InvalidFileError("Only PDF files can be uploaded.", value=str(pdf_path))

        limit_mb = self.config.registry.max_pdf_size_mb
        size = pdf_path.stat().st_size
        if size > limit_mb * 1024 * 1024:
            raise InvalidFileError(
                f"The file is larger than {limit_mb}MB ({format_file_size(size)}).",
                value=str(pdf_path)
            )
        return pdf_path

    def upload_pdf(self, path: Union[str, Path], slug: Optional[str] = None) -> ShortLink:
        """
        Upload a PDF to the repository and register it.

        Raises:
            MissingCredentialsError: If no token/username/repository is set
            InvalidFileError: If the file is missing, not a PDF or too large
            DuplicateSlugError: If the slug is taken
        """
        self._require_credentials()
        pdf_path = self.validate_pdf(path)
        slug = resolve_slug(slug, self.config.registry.slug_length)

        data = pdf_path.read_bytes()
        logger.info(f"Uploading {pdf_path.name} ({format_file_size(len(data))}) as {slug}")

        entry = self.registry.add_pdf(slug, data, filename=pdf_path.name)
        return ShortLink(slug=slug, short_url=self.short_url(slug), entry=entry)

    def list_links(self) -> List[RegistryEntry]:
        """All registered links, newest first."""
        self._require_credentials()
        return self.registry.list_entries()

    def delete_link(self, slug: str, purge: bool = False) -> RegistryEntry:
        """
        Remove a link.

        Raises:
            InvalidSlugError: If ``slug`` is empty or has characters a slug cannot have
            SlugNotFoundError: If no such link exists
        """
        if not is_valid_slug(slug):
            raise InvalidSlugError(f"Not a valid slug: {slug!r}", value=slug)
        self._require_credentials()
        return self.registry.delete(slug, purge=purge)
