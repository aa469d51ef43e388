"""
Plain-text torrent listing.
"""

from __future__ import annotations

import sys
from typing import TextIO

from ..models import Torrent
from .formatters import format_gigabytes, format_megabytes, format_timestamp


def print_torrents(torrents: list[Torrent], verbose: bool = False, out: TextIO | None = None) -> None:
    """
    Print one line per torrent followed by a total.

    Args:
        torrents: Torrents to list, already sorted
        verbose: Include time of day, hash and file count
        out: Stream to write to (defaults to stdout)
    """
    out = out or sys.stdout
    total = 0
    for torrent in torrents:
        stamp = format_timestamp(torrent.modified, verbose)
        print(f"{stamp} {format_megabytes(torrent.size)} {torrent.name}", file=out)
        if verbose:
            print(f"\tHash: {torrent.info_hash}\n\tFiles: {torrent.file_count}", file=out)
        total += torrent.size
    print(f"Total: {len(torrents)} torrents, {format_gigabytes(total)}", file=out)


def print_paths(torrents: list[Torrent], out: TextIO | None = None) -> None:
    """Print the base path of each torrent, one per line."""
    out = out or sys.stdout
    for torrent in torrents:
        print(torrent.path, file=out)
