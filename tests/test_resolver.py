"""Tests for xmindpreview.resolver module."""

import pytest

from xmindpreview.errors import FileNotFound, NoActiveDocument
from xmindpreview.resolver import (
    candidate_paths,
    resolve_location,
    resolve_relative_path,
)
from xmindpreview.vault import Vault


class FakeVault:
    """Lookup that records every path it is asked about."""

    def __init__(self, files):
        self.files = set(files)
        self.lookups = []

    def is_file(self, path):
        self.lookups.append(path)
        return path in self.files


class TestResolveRelativePath:
    """Tests for resolve_relative_path function."""

    def test_sibling_directory(self):
        assert resolve_relative_path("notes/page.md", "sub/doc.xmind") == (
            "notes/sub/doc.xmind"
        )

    def test_parent_directory(self):
        assert resolve_relative_path("notes/sub/page.md", "../shared/doc.xmind") == (
            "notes/shared/doc.xmind"
        )

    def test_dot_segments_skipped(self):
        assert resolve_relative_path("notes/page.md", "./a/./b.xmind") == (
            "notes/a/b.xmind"
        )

    def test_document_at_root(self):
        """Test a document at the vault root resolves without a leading slash."""
        assert resolve_relative_path("page.md", "maps/a.xmind") == "maps/a.xmind"

    def test_parent_above_root_is_noop(self):
        assert resolve_relative_path("page.md", "../../a.xmind") == "a.xmind"

    def test_empty_segments_skipped(self):
        assert resolve_relative_path("notes/page.md", "a//b.xmind") == (
            "notes/a/b.xmind"
        )


class TestCandidatePaths:
    """Tests for candidate_paths function."""

    def test_absolute_target(self):
        """Test absolute target strips the slash, independent of document."""
        assert candidate_paths("/drafts/xmind/a.xmind", "x/y/z.md") == [
            "drafts/xmind/a.xmind"
        ]

    def test_relative_then_verbatim(self):
        assert candidate_paths("maps/a.xmind", "notes/page.md") == [
            "notes/maps/a.xmind",
            "maps/a.xmind",
        ]

    def test_duplicates_removed(self):
        """Test a root-level document does not try the same path twice."""
        assert candidate_paths("maps/a.xmind", "page.md") == ["maps/a.xmind"]


class TestResolveLocation:
    """Tests for resolve_location function."""

    def test_relative_hit(self):
        vault = FakeVault({"notes/sub/doc.xmind"})
        assert resolve_location("sub/doc.xmind", "notes/page.md", vault) == (
            "notes/sub/doc.xmind"
        )
        assert vault.lookups == ["notes/sub/doc.xmind"]

    def test_absolute_hit(self):
        vault = FakeVault({"drafts/xmind/a.xmind"})
        assert resolve_location("/drafts/xmind/a.xmind", "x/y.md", vault) == (
            "drafts/xmind/a.xmind"
        )

    def test_fallback_to_vault_root(self):
        """Test a relative miss retries the target from the vault root."""
        vault = FakeVault({"maps/a.xmind"})
        assert resolve_location("maps/a.xmind", "notes/page.md", vault) == (
            "maps/a.xmind"
        )
        assert vault.lookups == ["notes/maps/a.xmind", "maps/a.xmind"]

    def test_relative_preferred_over_fallback(self):
        vault = FakeVault({"maps/a.xmind", "notes/maps/a.xmind"})
        assert resolve_location("maps/a.xmind", "notes/page.md", vault) == (
            "notes/maps/a.xmind"
        )

    def test_not_found_names_last_attempt(self):
        vault = FakeVault(set())
        with pytest.raises(FileNotFound) as excinfo:
            resolve_location("maps/a.xmind", "notes/page.md", vault)
        assert excinfo.value.path == "maps/a.xmind"
        assert "maps/a.xmind" in str(excinfo.value)

    def test_absolute_not_found(self):
        vault = FakeVault(set())
        with pytest.raises(FileNotFound) as excinfo:
            resolve_location("/drafts/a.xmind", "notes/page.md", vault)
        assert excinfo.value.path == "drafts/a.xmind"
        assert vault.lookups == ["drafts/a.xmind"]

    @pytest.mark.parametrize("document_path", [None, ""])
    def test_no_active_document(self, document_path):
        vault = FakeVault({"drafts/a.xmind"})
        with pytest.raises(NoActiveDocument):
            resolve_location("/drafts/a.xmind", document_path, vault)

    def test_with_real_vault(self, vault_dir):
        vault = Vault(vault_dir)
        assert resolve_location("../shared/doc.xmind", "notes/sub/page.md", vault) == (
            "notes/shared/doc.xmind"
        )
