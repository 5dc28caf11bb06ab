"""
Registry kept as a single ``database.json`` document in the repository.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..error_handling import (
    RegistryError, DuplicateSlugError, SlugNotFoundError, NotFoundError,
    RepositoryNotFoundError, ConflictError, retry
)
from ..models import LinkType, RegistryEntry
from .base_registry import BaseRegistry

Document = Dict[str, Any]


class JsonRegistry(BaseRegistry):
    """
    Slug registry stored as one JSON object: ``{slug: {target, type, created}}``.

    Every change fetches the document and its sha, mutates it in memory and
    PUTs it back with that sha. A concurrent writer makes the PUT fail with
    a conflict; the cycle is repeated ``conflict_retries`` times before the
    conflict is raised.
    """

    backend_name = "json"

    @property
    def database_path(self) -> str:
        return self.config.database_path

    def pdf_path(self, slug: str) -> str:
        return f"{self.config.pdf_directory.strip('/')}/{slug}.pdf"

    def fetch(self) -> Tuple[Document, Optional[str]]:
        """
        Read the registry document.

        Returns:
            Tuple of (document, sha); sha is None when the document does
            not exist yet

        Raises:
            RepositoryNotFoundError: If the repository itself is missing
            AuthenticationError: If the token is rejected
            RegistryError: If the document is not a JSON object
        """
        remote = self.client.get_contents(self.database_path)

        if remote is None:
            # Missing file: either first use or a wrong repository.
            try:
                self.client.get_repository()
            except NotFoundError as e:
                raise RepositoryNotFoundError(
                    f"Repository not found: {self.client.owner}/{self.client.repo}",
                    status_code=e.status_code,
                    response_data=e.response_data
                ) from e

            self.logger.info(f"{self.database_path} does not exist yet; starting an empty registry")
            return {}, None

        try:
            document = json.loads(remote.content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise RegistryError(
                f"{self.database_path} is not valid JSON: {e}",
                path=self.database_path,
                error_code="corrupt_registry",
                cause=e
            ) from e

        if not isinstance(document, dict):
            raise RegistryError(
                f"{self.database_path} must contain a JSON object",
                path=self.database_path,
                error_code="corrupt_registry"
            )

        self.logger.debug(f"Fetched {len(document)} entries from {self.database_path} ({remote.sha})")
        return document, remote.sha

    def update(self, document: Document, sha: Optional[str], message: str) -> None:
        """
        Write the registry document back.

        Args:
            document: Complete new document
            sha: Sha returned by ``fetch`` (None on first write)
            message: Commit message
        """
        body = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
        self.client.put_contents(self.database_path, body, message, sha=sha)

    def _modify(
        self,
        mutate: Callable[[Document], Any],
        message: str,
        prefetched: Optional[Tuple[Document, Optional[str]]] = None
    ) -> Any:
        """
        Run one fetch-mutate-put cycle, repeating it on sha conflicts.

        Args:
            mutate: Changes the document in place and returns the result
            message: Commit message
            prefetched: Document and sha already read by the caller, used
                for the first attempt only
        """
        pending = [prefetched] if prefetched is not None else []

        def cycle():
            document, sha = pending.pop() if pending else self.fetch()
            result = mutate(document)
            self.update(document, sha, message)
            return result

        attempts = 1 + max(0, self.config.conflict_retries)
        return retry(max_attempts=attempts, exceptions=[ConflictError])(cycle)()

    def get(self, slug: str) -> Optional[RegistryEntry]:
        document, _ = self.fetch()
        value = document.get(slug)
        if not isinstance(value, dict):
            return None
        return RegistryEntry.from_dict(slug, value)

    def entries(self) -> List[RegistryEntry]:
        document, _ = self.fetch()
        return [
            RegistryEntry.from_dict(slug, value)
            for slug, value in document.items()
            if isinstance(value, dict)
        ]

    def add_url(self, slug: str, target: str) -> RegistryEntry:
        def mutate(document: Document) -> RegistryEntry:
            if slug in document:
                raise DuplicateSlugError(slug)
            entry = RegistryEntry(slug=slug, target=target, type=LinkType.URL)
            document[slug] = entry.to_dict()
            return entry

        entry = self._modify(mutate, f"🔗 Add short link: {slug}")
        self.logger.info(f"Registered {slug} -> {target}", extra={"slug": slug})
        return entry

    def add_pdf(self, slug: str, data: bytes, filename: str = "") -> RegistryEntry:
        document, sha = self.fetch()
        if slug in document:
            raise DuplicateSlugError(slug)

        pdf_path = self.pdf_path(slug)
        existing_sha = self.client.get_file_sha(pdf_path)
        if existing_sha:
            self.logger.warning(
                f"Replacing unregistered file {pdf_path}", extra={"slug": slug, "path": pdf_path}
            )
        self.client.put_contents(pdf_path, data, f"📄 Add PDF: {slug}", sha=existing_sha)
        target = self.client.raw_url(pdf_path)

        def mutate(doc: Document) -> RegistryEntry:
            if slug in doc:
                raise DuplicateSlugError(slug)
            entry = RegistryEntry(slug=slug, target=target, type=LinkType.PDF)
            doc[slug] = entry.to_dict()
            return entry

        entry = self._modify(mutate, f"🔗 Add short link: {slug}", prefetched=(document, sha))
        self.logger.info(f"Registered PDF {slug} ({filename or pdf_path}, {len(data)} bytes)", extra={"slug": slug})
        return entry

    def delete(self, slug: str, purge: bool = False) -> RegistryEntry:
        def mutate(document: Document) -> RegistryEntry:
            if slug not in document:
                raise SlugNotFoundError(slug)
            value = document.pop(slug)
            return RegistryEntry.from_dict(slug, value if isinstance(value, dict) else {})

        entry = self._modify(mutate, f"🗑️ Remove short link: {slug}")
        self.logger.info(f"Removed {slug}", extra={"slug": slug, "path": self.database_path})

        if purge and entry.type is LinkType.PDF:
            pdf_path = self.pdf_path(slug)
            pdf_sha = self.client.get_file_sha(pdf_path)
            if pdf_sha:
                self.client.delete_contents(pdf_path, f"🗑️ Remove PDF: {slug}", pdf_sha)
            else:
                self.logger.warning(f"{pdf_path} was already gone")

        return entry

    def short_url(self, slug: str) -> str:
        return f"{self.base_url}/{slug}"
