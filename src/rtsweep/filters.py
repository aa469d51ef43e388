"""
Selection and ordering of torrent records.
"""

from __future__ import annotations

import re
import time

from pydantic import BaseModel, Field, field_validator

from .models import Torrent

DAY = 24 * 60 * 60
MIB = 1024 * 1024

SORT_ORDERS = ("date", "name", "size")


class FilterCriteria(BaseModel):
    """Predicates applied to the torrent list. Zero disables a numeric bound."""

    older_days: int = Field(default=0, ge=0, description="Keep torrents older than this many days")
    newer_days: int = Field(default=0, ge=0, description="Keep torrents newer than this many days")
    min_size_mb: int = Field(default=0, ge=0, description="Keep torrents of at least this many MiB")
    name: str = Field(default="", description="Regular expression searched in the torrent name")

    @field_validator("name")
    @classmethod
    def check_pattern(cls, value: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid name pattern {value!r}: {e}") from e
        return value


def filter_torrents(torrents: list[Torrent], criteria: FilterCriteria, now: float | None = None) -> list[Torrent]:
    """
    Select active torrents matching every criterion.

    Args:
        torrents: Candidate torrents
        criteria: Age, size and name predicates
        now: Reference time in epoch seconds (defaults to the current time)

    Returns:
        Matching torrents in input order
    """
    if now is None:
        now = time.time()
    pattern = re.compile(criteria.name)
    older_than = now - criteria.older_days * DAY
    newer_than = now - criteria.newer_days * DAY
    min_size = criteria.min_size_mb * MIB

    selected = []
    for torrent in torrents:
        if not torrent.active:
            continue
        if criteria.older_days and torrent.mtime > older_than:
            continue
        if criteria.newer_days and torrent.mtime < newer_than:
            continue
        if torrent.size < min_size:
            continue
        if not pattern.search(torrent.name):
            continue
        selected.append(torrent)
    return selected


def without_external_links(torrents: list[Torrent]) -> list[Torrent]:
    """Keep torrents whose files are loaded and not hard-linked from elsewhere."""
    return [t for t in torrents if t.has_files and not t.has_external_links]


def sort_torrents(torrents: list[Torrent], order: str = "date") -> list[Torrent]:
    """
    Sort torrents by modification time, name or size (ascending).

    Unknown orders fall back to date.
    """
    if order == "name":
        return sorted(torrents, key=lambda t: t.name)
    if order == "size":
        return sorted(torrents, key=lambda t: t.size)
    return sorted(torrents, key=lambda t: t.mtime)
