"""
Command-line interface for listing, stopping and deleting rTorrent torrents.
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TextIO

from pydantic import ValidationError

from .client import RTorrentClient
from .config import ClientConfig
from .errors import FilesystemError, RTSweepError
from .filters import SORT_ORDERS, FilterCriteria, filter_torrents, sort_torrents, without_external_links
from .models import Torrent
from .report import print_paths, print_torrents

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


@dataclass
class ActionReport:
    """Outcome of the stop/delete steps, each recorded independently."""

    stopped: bool = False
    erased: bool = False
    removed: list[str] = field(default_factory=list)
    stop_error: RTSweepError | None = None
    erase_error: RTSweepError | None = None
    removal_errors: list[FilesystemError] = field(default_factory=list)

    @property
    def errors(self) -> list[RTSweepError]:
        """All failures, in the order the steps ran."""
        errors: list[RTSweepError] = []
        if self.stop_error is not None:
            errors.append(self.stop_error)
        if self.erase_error is not None:
            errors.append(self.erase_error)
        errors.extend(self.removal_errors)
        return errors

    @property
    def ok(self) -> bool:
        return not self.errors


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    defaults = ClientConfig.from_env()
    parser = argparse.ArgumentParser(prog="rtsweep", description="Select and clean up rTorrent torrents")
    parser.add_argument("--socket", default=defaults.socket, help=f"SCGI socket (default: {defaults.socket})")
    parser.add_argument("--older", type=int, default=0, metavar="DAYS", help="Older than DAYS days")
    parser.add_argument("--newer", type=int, default=0, metavar="DAYS", help="Newer than DAYS days")
    parser.add_argument("--size", type=int, default=0, metavar="MB", help="Larger than MB megabytes")
    parser.add_argument("--name", default="", metavar="REGEX", help="Regexp which should match the name")
    parser.add_argument("--nolinks", action="store_true", help="Without hard-links outside base path")
    parser.add_argument("--stop", action="store_true", help="Stop matched torrents")
    parser.add_argument("--delete", action="store_true", help="Delete matched torrents (with --stop)")
    parser.add_argument("--sort", choices=SORT_ORDERS, default="date", help="Sort order (default: date)")
    parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """Send log records to stderr at the requested level."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def confirm(question: str, input_fn: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question; anything but y/yes is a no."""
    try:
        reply = input_fn(f"{question} (y/N): ")
    except EOFError:
        return False
    return reply.strip().lower() in ("y", "yes")


def remove_path(path: str) -> bool:
    """
    Remove a torrent's data from disk.

    Args:
        path: File or directory to remove

    Returns:
        True if something was removed, False if it was already gone
    """
    if not path:
        raise FilesystemError(path, "refusing to remove an empty path")
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FilesystemError(path, e.strerror or str(e)) from e
    return True


def stop_and_delete(
    client: RTorrentClient,
    torrents: list[Torrent],
    delete: bool,
    confirm_fn: Confirm,
    out: TextIO,
) -> ActionReport:
    """
    Stop the torrents and optionally erase them and their data.

    Each step runs whether or not the previous one failed.
    """
    report = ActionReport()
    print_paths(torrents, out)

    if confirm_fn("Confirm stopping these torrents"):
        print("Stopping.", file=out)
        try:
            client.stop_torrents(torrents)
            report.stopped = True
        except RTSweepError as e:
            logger.error(f"Stopping torrents: {e}")
            report.stop_error = e

    if delete and confirm_fn("Confirm DELETING these torrents"):
        try:
            client.delete_torrents(torrents)
            report.erased = True
        except RTSweepError as e:
            logger.error(f"Deleting torrents: {e}")
            report.erase_error = e

        for torrent in torrents:
            print(f"Deleting {torrent.path}", file=out)
            try:
                if remove_path(torrent.path):
                    report.removed.append(torrent.path)
            except FilesystemError as e:
                logger.error(f"Removing data: {e}")
                report.removal_errors.append(e)

    return report


def run(
    args: argparse.Namespace,
    client: RTorrentClient | None = None,
    out: TextIO | None = None,
    confirm_fn: Confirm | None = None,
) -> int:
    """
    Execute one invocation.

    Returns:
        Process exit status
    """
    out = out or sys.stdout
    if confirm_fn is None:
        confirm_fn = (lambda question: True) if args.yes else confirm
    if client is None:
        config = ClientConfig.from_env()
        client = RTorrentClient(ClientConfig(socket=args.socket, timeout=config.timeout))

    try:
        criteria = FilterCriteria(older_days=args.older, newer_days=args.newer, min_size_mb=args.size, name=args.name)
    except ValidationError as e:
        logger.error(f"Invalid filter: {e}")
        return 2

    try:
        torrents = client.get_torrents()
    except RTSweepError as e:
        logger.error(f"Error retrieving torrents: {e}")
        return 1

    selected = filter_torrents(torrents, criteria)

    if args.nolinks or args.verbose:
        # File lists cost one round trip, only fetch them when needed.
        try:
            client.get_torrent_files(selected)
        except RTSweepError as e:
            logger.error(f"Error retrieving torrent files: {e}")

    if args.nolinks:
        selected = without_external_links(selected)

    if args.stop:
        report = stop_and_delete(client, selected, args.delete, confirm_fn, out)
        return 0 if report.ok else 1

    print_torrents(sort_torrents(selected, args.sort), verbose=args.verbose, out=out)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, debug=args.debug)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
