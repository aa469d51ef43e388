"""Tests for torrent filtering and sorting."""

import pytest
from pydantic import ValidationError

from rtsweep.filters import DAY, MIB, FilterCriteria, filter_torrents, sort_torrents, without_external_links
from rtsweep.models import Torrent

NOW = 1_700_000_000.0


def make_torrent(name: str, age_days: float = 1, size: int = 0, active: bool = True, **kwargs) -> Torrent:
    return Torrent(
        info_hash=name.upper(),
        name=name,
        path=f"/data/{name}",
        mtime=NOW - age_days * DAY,
        size=size,
        active=active,
        **kwargs,
    )


@pytest.fixture
def aged() -> list[Torrent]:
    return [make_torrent("old", 40), make_torrent("mid", 10), make_torrent("new", 1)]


class TestFilterTorrents:
    """Tests for filter_torrents."""

    def test_no_criteria_keeps_active(self, aged: list[Torrent]) -> None:
        """Test empty criteria keep every active torrent."""
        torrents = aged + [make_torrent("gone", active=False)]
        assert [t.name for t in filter_torrents(torrents, FilterCriteria(), NOW)] == ["old", "mid", "new"]

    def test_older_than(self, aged: list[Torrent]) -> None:
        """Test an age-older threshold of 30 days keeps only the 40-day torrent."""
        selected = filter_torrents(aged, FilterCriteria(older_days=30), NOW)
        assert [t.name for t in selected] == ["old"]

    def test_newer_than(self, aged: list[Torrent]) -> None:
        """Test an age-newer threshold of 5 days keeps only the 1-day torrent."""
        selected = filter_torrents(aged, FilterCriteria(newer_days=5), NOW)
        assert [t.name for t in selected] == ["new"]

    def test_age_window(self, aged: list[Torrent]) -> None:
        """Test older and newer combine into a window."""
        selected = filter_torrents(aged, FilterCriteria(older_days=5, newer_days=30), NOW)
        assert [t.name for t in selected] == ["mid"]

    def test_min_size(self) -> None:
        """Test torrents smaller than the size bound are dropped."""
        torrents = [make_torrent("small", size=10 * MIB - 1), make_torrent("exact", size=10 * MIB)]
        assert [t.name for t in filter_torrents(torrents, FilterCriteria(min_size_mb=10), NOW)] == ["exact"]

    def test_name_pattern_searches(self) -> None:
        """Test the name pattern matches anywhere in the name."""
        torrents = [make_torrent("Some.Show.S01"), make_torrent("Other.Movie")]
        selected = filter_torrents(torrents, FilterCriteria(name=r"Show\.S\d+"), NOW)
        assert [t.name for t in selected] == ["Some.Show.S01"]

    def test_inactive_excluded(self) -> None:
        """Test inactive torrents never pass."""
        torrents = [make_torrent("stopped", 40, active=False)]
        assert filter_torrents(torrents, FilterCriteria(older_days=30), NOW) == []

    def test_invalid_pattern(self) -> None:
        """Test an invalid regex is rejected up front."""
        with pytest.raises(ValidationError, match="Invalid name pattern"):
            FilterCriteria(name="(")

    def test_negative_days(self) -> None:
        """Test negative thresholds are rejected."""
        with pytest.raises(ValidationError):
            FilterCriteria(older_days=-1)


class TestWithoutExternalLinks:
    """Tests for the link filter."""

    def test_keeps_boundary(self) -> None:
        """Test link total equal to file count counts as no external links."""
        torrents = [
            make_torrent("clean", files=["a", "b"], links=2),
            make_torrent("linked", files=["a", "b"], links=3),
            make_torrent("fewer", files=["a", "b"], links=1),
        ]
        assert [t.name for t in without_external_links(torrents)] == ["clean", "fewer"]

    def test_drops_unloaded(self) -> None:
        """Test torrents without a file list are not selected."""
        assert without_external_links([make_torrent("unknown")]) == []


class TestSortTorrents:
    """Tests for sort orders."""

    @pytest.fixture
    def torrents(self) -> list[Torrent]:
        return [
            make_torrent("b", age_days=1, size=300),
            make_torrent("c", age_days=30, size=100),
            make_torrent("a", age_days=10, size=200),
        ]

    def test_by_date(self, torrents: list[Torrent]) -> None:
        """Test date order puts the oldest first."""
        assert [t.name for t in sort_torrents(torrents, "date")] == ["c", "a", "b"]

    def test_by_name(self, torrents: list[Torrent]) -> None:
        """Test name order is alphabetical."""
        assert [t.name for t in sort_torrents(torrents, "name")] == ["a", "b", "c"]

    def test_by_size(self, torrents: list[Torrent]) -> None:
        """Test size order is smallest first."""
        assert [t.name for t in sort_torrents(torrents, "size")] == ["c", "a", "b"]

    def test_unknown_order_is_date(self, torrents: list[Torrent]) -> None:
        """Test unknown orders fall back to date."""
        assert [t.name for t in sort_torrents(torrents, "bogus")] == ["c", "a", "b"]
