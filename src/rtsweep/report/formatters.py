"""
Formatting helpers for the torrent report.
"""

from __future__ import annotations

from datetime import datetime

DATE_FORMAT = "%Y.%m.%d"
DATETIME_FORMAT = "%Y.%m.%d-%H:%M:%S"


def format_timestamp(moment: datetime | None, verbose: bool = False) -> str:
    """Format a local time, with seconds when verbose. An unknown time prints as the epoch."""
    if moment is None:
        moment = datetime.fromtimestamp(0)
    return moment.strftime(DATETIME_FORMAT if verbose else DATE_FORMAT)


def format_megabytes(size_bytes: int) -> str:
    """Format bytes as whole MiB, right aligned."""
    return f"{size_bytes // 1024 // 1024:6d}MB"


def format_gigabytes(size_bytes: int) -> str:
    """Format bytes as GiB with two decimals."""
    return f"{size_bytes / 1024 / 1024 / 1024:.2f}GB"
