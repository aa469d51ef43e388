"""
Report output for selected torrents.
"""

from .formatters import format_gigabytes, format_megabytes, format_timestamp
from .printer import print_paths, print_torrents

__all__ = [
    "print_torrents",
    "print_paths",
    "format_timestamp",
    "format_megabytes",
    "format_gigabytes",
]
