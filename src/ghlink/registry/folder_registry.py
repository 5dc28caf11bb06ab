"""
Registry kept as one folder per slug, served directly by GitHub Pages.
"""

import json
from typing import List, Optional

from ..error_handling import RegistryError, DuplicateSlugError, SlugNotFoundError
from ..models import LinkType, RegistryEntry
from .base_registry import BaseRegistry
from ..slugs import is_valid_slug
from .pages import render_redirect_page, render_pdf_viewer

INDEX_NAME = "index.html"
METADATA_NAME = "link.json"
PDF_NAME = "document.pdf"


class FolderRegistry(BaseRegistry):
    """
    Each slug is a top-level folder holding static files:

    * ``index.html`` - redirect stub, or viewer page for PDFs
    * ``document.pdf`` - the uploaded PDF (PDF links only)
    * ``link.json`` - the entry itself

    No shared document exists, so creating one link never conflicts with
    creating another; ``link.json`` is written last and marks a complete
    folder.
    """

    backend_name = "folder"

    def _path(self, slug: str, name: str) -> str:
        return f"{slug}/{name}"

    def get(self, slug: str) -> Optional[RegistryEntry]:
        metadata_path = self._path(slug, METADATA_NAME)
        remote = self.client.get_contents(metadata_path)
        if remote is None:
            return None

        try:
            data = json.loads(remote.content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise RegistryError(
                f"{metadata_path} is not valid JSON: {e}",
                slug=slug, path=metadata_path, error_code="corrupt_registry", cause=e
            ) from e

        if not isinstance(data, dict):
            raise RegistryError(
                f"{metadata_path} must contain a JSON object",
                slug=slug, path=metadata_path, error_code="corrupt_registry"
            )
        return RegistryEntry.from_dict(slug, data)

    def exists(self, slug: str) -> bool:
        return bool(
            self.client.get_file_sha(self._path(slug, INDEX_NAME))
            or self.client.get_file_sha(self._path(slug, METADATA_NAME))
        )

    def entries(self) -> List[RegistryEntry]:
        entries = []
        for item in self.client.list_directory(""):
            if not item.is_dir:
                continue
            try:
                entry = self.get(item.name)
            except RegistryError as e:
                self.logger.warning(
                    f"Skipping folder {item.name}: {e.message}", extra={"slug": item.name, "path": e.path}
                )
                continue
            if entry is not None:
                entries.append(entry)
        return entries

    def _write_entry(self, entry: RegistryEntry) -> None:
        self.client.put_contents(
            self._path(entry.slug, METADATA_NAME),
            (entry.to_json() + "\n").encode("utf-8"),
            f"🔗 Add short link: {entry.slug}"
        )

    def add_url(self, slug: str, target: str) -> RegistryEntry:
        if self.exists(slug):
            raise DuplicateSlugError(slug)

        entry = RegistryEntry(slug=slug, target=target, type=LinkType.URL)
        self.client.put_contents(
            self._path(slug, INDEX_NAME),
            render_redirect_page(target).encode("utf-8"),
            f"🔗 Add redirect page: {slug}"
        )
        self._write_entry(entry)

        self.logger.info(f"Registered {slug} -> {target}", extra={"slug": slug})
        return entry

    def add_pdf(self, slug: str, data: bytes, filename: str = "") -> RegistryEntry:
        if self.exists(slug):
            raise DuplicateSlugError(slug)

        entry = RegistryEntry(slug=slug, target=self.short_url(slug) + PDF_NAME, type=LinkType.PDF)
        self.client.put_contents(self._path(slug, PDF_NAME), data, f"📄 Add PDF: {slug}")
        self.client.put_contents(
            self._path(slug, INDEX_NAME),
            render_pdf_viewer(filename or slug, PDF_NAME).encode("utf-8"),
            f"📄 Add PDF viewer: {slug}"
        )
        self._write_entry(entry)

        self.logger.info(f"Registered PDF {slug} ({filename or PDF_NAME}, {len(data)} bytes)")
        return entry

    def delete(self, slug: str, purge: bool = False) -> RegistryEntry:
        # Only folders that hold a link page or its metadata are links.
        if not is_valid_slug(slug) or not self.exists(slug):
            raise SlugNotFoundError(slug)

        files = [item for item in self.client.list_directory(slug) if item.is_file]
        if not files:
            raise SlugNotFoundError(slug)

        try:
            entry = self.get(slug)
        except RegistryError:
            entry = None
        if entry is None:
            entry = RegistryEntry(slug=slug, target="", created="")

        for item in files:
            self.client.delete_contents(item.path, f"🗑️ Remove short link: {slug}", item.sha)

        self.logger.info(f"Removed folder {slug} ({len(files)} files)")
        return entry

    def short_url(self, slug: str) -> str:
        return f"{self.base_url}/{slug}/"
