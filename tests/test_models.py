"""Tests for the Torrent model."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from rtsweep.models import Torrent


class TestTorrent:
    """Tests for Torrent records."""

    def test_defaults(self) -> None:
        """Test lazy fields start unloaded."""
        torrent = Torrent(info_hash="ABC", name="test")

        assert torrent.files is None
        assert torrent.links == 0
        assert not torrent.has_files
        assert torrent.file_count == 0
        assert torrent.modified is None

    def test_info_hash_is_frozen(self) -> None:
        """Test the identifier cannot be reassigned."""
        torrent = Torrent(info_hash="ABC", name="test")
        with pytest.raises(ValidationError):
            torrent.info_hash = "DEF"

    def test_enrich_in_place(self) -> None:
        """Test files and links can be filled in after creation."""
        torrent = Torrent(info_hash="ABC", name="test")
        torrent.files = ["a", "b"]
        torrent.links = 2

        assert torrent.has_files
        assert torrent.file_count == 2

    def test_assignment_is_validated(self) -> None:
        """Test assignments are type-checked."""
        torrent = Torrent(info_hash="ABC", name="test")
        with pytest.raises(ValidationError):
            torrent.links = -1

    def test_modified(self) -> None:
        """Test the modification datetime follows mtime."""
        torrent = Torrent(info_hash="ABC", name="test", mtime=1_700_000_000.0)
        assert torrent.modified == datetime.fromtimestamp(1_700_000_000.0)


class TestExternalLinks:
    """Tests for external link classification."""

    @pytest.mark.parametrize(
        ("links", "files", "expected"),
        [
            (2, 3, False),
            (3, 3, False),
            (4, 3, True),
        ],
    )
    def test_classification(self, links: int, files: int, expected: bool) -> None:
        """Test links above the file count mean external links; equal does not."""
        torrent = Torrent(info_hash="ABC", name="test", files=[f"f{i}" for i in range(files)], links=links)
        assert torrent.has_external_links is expected

    def test_unloaded_files(self) -> None:
        """Test classification needs the file list."""
        with pytest.raises(ValueError, match="not been loaded"):
            _ = Torrent(info_hash="ABC", name="test").has_external_links
