"""Tests for the folder-per-slug registry."""

import json

import pytest

from ghlink.error_handling import DuplicateSlugError, SlugNotFoundError
from ghlink.models import LinkType
from ghlink.registry import FolderRegistry, render_pdf_viewer, render_redirect_page

from conftest import BASE_URL, FakeGitHub

PDF_BYTES = b"%PDF-1.4\n" + bytes(range(256)) * 8


class TestAddUrl:
    """Tests for FolderRegistry.add_url."""

    def test_writes_redirect_page_and_metadata(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        entry = folder_registry.add_url("abc", "https://example.com/path?q=1&r=2")

        page = fake_github.read("abc/index.html").decode("utf-8")
        assert 'content="0; url=https://example.com/path?q=1&amp;r=2"' in page
        assert 'location.replace("https://example.com/path?q=1&r=2");' in page

        metadata = fake_github.read_json("abc/link.json")
        assert metadata == {"target": "https://example.com/path?q=1&r=2", "type": "url", "created": entry.created}

        written = [call["path"].rsplit("/", 1)[-1] for call in fake_github.calls("PUT")]
        assert written == ["index.html", "link.json"]

    def test_duplicate_makes_no_write(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        fake_github.add_file("abc/index.html", b"<html></html>")

        with pytest.raises(DuplicateSlugError):
            folder_registry.add_url("abc", "https://example.com")

        assert fake_github.calls("PUT") == []

    def test_short_url_has_trailing_slash(self, folder_registry: FolderRegistry) -> None:
        assert folder_registry.short_url("abc") == f"{BASE_URL}/abc/"


class TestAddPdf:
    """Tests for FolderRegistry.add_pdf."""

    def test_writes_pdf_viewer_and_metadata(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        entry = folder_registry.add_pdf("report", PDF_BYTES, "Q3 report.pdf")

        assert fake_github.read("report/document.pdf") == PDF_BYTES
        viewer = fake_github.read("report/index.html").decode("utf-8")
        assert "<title>Q3 report.pdf</title>" in viewer
        assert 'data="document.pdf"' in viewer

        assert entry.type is LinkType.PDF
        assert entry.target == f"{BASE_URL}/report/document.pdf"
        assert fake_github.read_json("report/link.json")["type"] == "pdf"

    def test_duplicate_uploads_nothing(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        folder_registry.add_url("report", "https://example.com")
        puts = len(fake_github.calls("PUT"))

        with pytest.raises(DuplicateSlugError):
            folder_registry.add_pdf("report", PDF_BYTES)

        assert len(fake_github.calls("PUT")) == puts
        assert "report/document.pdf" not in fake_github.files


class TestListAndDelete:
    """Tests for entries, list_entries and delete."""

    def test_lists_folders_newest_first(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        fake_github.add_file("README.md", b"# links")
        fake_github.add_file("old/link.json", json.dumps(
            {"target": "https://old.example.com", "type": "url", "created": "2023-01-01T00:00:00.000Z"}
        ).encode())
        fake_github.add_file("new/link.json", json.dumps(
            {"target": "https://new.example.com", "type": "url", "created": "2024-01-01T00:00:00.000Z"}
        ).encode())
        fake_github.add_file("assets/style.css", b"body {}")

        assert [entry.slug for entry in folder_registry.list_entries()] == ["new", "old"]

    def test_skips_corrupt_metadata(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        fake_github.add_file("good/link.json", b'{"target": "https://example.com", "type": "url"}')
        fake_github.add_file("bad/link.json", b"{oops")

        assert [entry.slug for entry in folder_registry.entries()] == ["good"]

    def test_delete_removes_every_file(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        folder_registry.add_pdf("report", PDF_BYTES)
        fake_github.add_file("keep/link.json", b'{"target": "https://example.com"}')

        entry = folder_registry.delete("report")

        assert entry.type is LinkType.PDF
        assert not any(path.startswith("report/") for path in fake_github.files)
        assert "keep/link.json" in fake_github.files
        assert len(fake_github.calls("DELETE")) == 3

    def test_delete_folder_without_metadata(self, folder_registry: FolderRegistry, fake_github: FakeGitHub) -> None:
        fake_github.add_file("legacy/index.html", b"<html></html>")

        entry = folder_registry.delete("legacy")

        assert entry.slug == "legacy"
        assert entry.target == ""
        assert fake_github.files == {}

    def test_delete_unknown_slug(self, folder_registry: FolderRegistry) -> None:
        with pytest.raises(SlugNotFoundError):
            folder_registry.delete("missing")

    def test_delete_refuses_folder_that_is_not_a_link(
        self, folder_registry: FolderRegistry, fake_github: FakeGitHub
    ) -> None:
        fake_github.add_file("docs/guide.md", b"# Guide")
        fake_github.add_file("pdfs/abc.pdf", b"%PDF-1.4")

        with pytest.raises(SlugNotFoundError):
            folder_registry.delete("docs")
        with pytest.raises(SlugNotFoundError):
            folder_registry.delete("pdfs")

        assert set(fake_github.files) == {"docs/guide.md", "pdfs/abc.pdf"}
        assert fake_github.calls("DELETE") == []

    @pytest.mark.parametrize("slug", ["", "../abc", "abc/index.html"])
    def test_delete_refuses_paths_outside_a_link(
        self, folder_registry: FolderRegistry, fake_github: FakeGitHub, slug: str
    ) -> None:
        fake_github.add_file("CNAME", b"go.example.com")
        fake_github.add_file("README.md", b"# links")
        fake_github.add_file("abc/link.json", b'{"target": "https://example.com"}')

        with pytest.raises(SlugNotFoundError):
            folder_registry.delete(slug)

        assert set(fake_github.files) == {"CNAME", "README.md", "abc/link.json"}
        assert fake_github.calls("DELETE") == []


class TestPages:
    """Tests for the static page renderers."""

    def test_redirect_escapes_markup(self) -> None:
        page = render_redirect_page('https://example.com/"><script>alert(1)</script>')

        assert "<script>alert(1)</script>" not in page
        assert "&quot;&gt;&lt;script&gt;" in page
        assert "<\\/script>" in page

    def test_pdf_viewer_escapes_title(self) -> None:
        page = render_pdf_viewer("<b>slides</b>", "document.pdf")

        assert "&lt;b&gt;slides&lt;/b&gt;" in page
        assert 'href="document.pdf" download' in page
