"""Tests for the TreeScanner class."""

from mddownloader.models import TreeEntry
from mddownloader.sync.scanner import TreeScanner


def _entry(path: str, type_: str = "blob") -> TreeEntry:
    return TreeEntry(path=path, type=type_, sha="0" * 40)


class TestTreeScanner:
    """Tests for candidate selection."""

    def test_markdown_blob_is_candidate(self):
        """A .md file is a candidate."""
        assert TreeScanner().is_candidate(_entry("guide.md")) is True

    def test_other_extension_never_candidate(self):
        """README.txt is never a candidate, whatever its type."""
        scanner = TreeScanner()

        assert scanner.is_candidate(_entry("README.txt")) is False
        assert scanner.is_candidate(_entry("README.txt", "tree")) is False

    def test_directory_named_like_markdown_ignored(self):
        """Trees and submodules are not files even with a .md suffix."""
        scanner = TreeScanner()

        assert scanner.is_candidate(_entry("docs.md", "tree")) is False
        assert scanner.is_candidate(_entry("vendor.md", "commit")) is False

    def test_symlink_ignored(self):
        """A symlink named like a Markdown file is not a candidate."""
        link = TreeEntry(path="docs/link.md", type="blob", sha="0" * 40, mode="120000")

        assert TreeScanner().is_candidate(link) is False
        assert TreeScanner().scan([link, _entry("docs/real.md")]) == [
            _entry("docs/real.md")
        ]

    def test_case_sensitive(self):
        """Upper-case extensions do not match."""
        assert TreeScanner().is_candidate(_entry("GUIDE.MD")) is False

    def test_scan_keeps_listing_order(self):
        """Candidates are returned in listing order."""
        entries = [
            _entry("z.md"),
            _entry("docs", "tree"),
            _entry("docs/a.md"),
            _entry("image.png"),
            _entry("b.md"),
        ]

        candidates = TreeScanner().scan(entries)

        assert [c.path for c in candidates] == ["z.md", "docs/a.md", "b.md"]

    def test_custom_extension(self):
        """Test scanning for another extension."""
        entries = [_entry("a.md"), _entry("b.rst")]

        candidates = TreeScanner(".rst").scan(entries)

        assert [c.path for c in candidates] == ["b.rst"]
