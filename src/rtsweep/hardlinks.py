"""
Hard-link counting for torrent data on disk.
"""

from __future__ import annotations

import logging
import os
import stat
from typing import Protocol

from .errors import FilesystemError
from .models import Torrent

logger = logging.getLogger(__name__)


class LinkCounter(Protocol):
    """Filesystem capability used by the resolver."""

    def is_dir(self, path: str) -> bool:
        """Check whether path is a directory (without following symlinks)."""
        ...

    def link_count(self, path: str) -> int:
        """Get the number of hard links to the inode at path."""
        ...


class PosixLinkCounter:
    """LinkCounter backed by lstat()."""

    def _lstat(self, path: str) -> os.stat_result:
        try:
            return os.lstat(path)
        except OSError as e:
            raise FilesystemError(path, e.strerror or str(e)) from e

    def is_dir(self, path: str) -> bool:
        return stat.S_ISDIR(self._lstat(path).st_mode)

    def link_count(self, path: str) -> int:
        return self._lstat(path).st_nlink


def member_paths(torrent: Torrent, is_dir: bool) -> list[str]:
    """
    Get the on-disk paths belonging to a torrent.

    Args:
        torrent: Torrent with a loaded file list
        is_dir: Whether the base path is a directory

    Returns:
        Declared files joined onto the base path, or just the base path
        for a single-file torrent
    """
    if not is_dir:
        return [torrent.path]
    return [os.path.join(torrent.path, f) for f in torrent.files or []]


def resolve_links(torrent: Torrent, counter: LinkCounter | None = None) -> int:
    """
    Sum the hard-link counts of every file in a torrent and store it on the record.

    Counts are added per declared file, not per inode, so two entries that
    share an inode are both counted. Unreadable files contribute nothing.

    Args:
        torrent: Torrent whose file list is loaded
        counter: Filesystem capability (defaults to lstat)

    Returns:
        The link total
    """
    if torrent.files is None:
        raise ValueError(f"File list for {torrent.info_hash} has not been loaded")
    if counter is None:
        counter = PosixLinkCounter()

    total = 0
    try:
        is_dir = counter.is_dir(torrent.path)
    except OSError as e:
        logger.warning(f"Reading {torrent.path!r}: {e}")
        torrent.links = total
        return total

    for path in member_paths(torrent, is_dir):
        try:
            total += counter.link_count(path)
        except OSError as e:
            logger.warning(f"Reading link count of {path!r}: {e}")

    torrent.links = total
    return total
