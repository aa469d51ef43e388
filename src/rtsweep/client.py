"""
Batch client for the rTorrent daemon.
"""

import logging
import os
from collections.abc import Callable, Sequence
from typing import Any, NamedTuple

from . import scgi
from .config import ClientConfig
from .errors import DecodeError
from .hardlinks import LinkCounter, PosixLinkCounter, resolve_links
from .models import Torrent
from .xmlrpc_codec import Call, decode_batch, decode_response, encode_batch, encode_call, expect_tuple

logger = logging.getLogger(__name__)

Transport = Callable[[str, bytes, float | None], bytes]

VIEW = "main"


class RemoteField(NamedTuple):
    """One column of the d.multicall2 projection."""

    name: str
    command: str
    type: type


# Request arguments and decoded tuples are both derived from this table,
# so the column order is defined in exactly one place.
TORRENT_FIELDS: tuple[RemoteField, ...] = (
    RemoteField("name", "d.name=", str),
    RemoteField("info_hash", "d.hash=", str),
    RemoteField("created", "d.creation_date=", int),
    RemoteField("size", "d.size_bytes=", int),
    RemoteField("active", "d.is_active=", int),
    RemoteField("path", "d.base_path=", str),
)


def _check_fields(fields: Sequence[RemoteField]) -> None:
    """Fail fast if the projection table is inconsistent."""
    names = [f.name for f in fields]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate field names in projection: {names}")
    for field in fields:
        if field.name not in Torrent.model_fields:
            raise ValueError(f"Projection field {field.name!r} is not a Torrent attribute")
        if not field.command.endswith("="):
            raise ValueError(f"Projection command {field.command!r} must end with '='")
        if field.type not in (str, int):
            raise ValueError(f"Projection field {field.name!r} has unsupported type {field.type!r}")


_check_fields(TORRENT_FIELDS)


class RTorrentClient:
    """Issues batched XML-RPC calls to rTorrent over SCGI."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        link_counter: LinkCounter | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Connection settings (defaults to ClientConfig())
            transport: Function performing one request/response exchange
            link_counter: Filesystem capability used for hard-link counts
        """
        self.config = config or ClientConfig()
        self.transport: Transport = transport or scgi.send
        self.link_counter: LinkCounter = link_counter or PosixLinkCounter()

    def _send(self, payload: bytes) -> bytes:
        return self.transport(self.config.socket, payload, self.config.timeout)

    def call(self, method: str, args: list[str | int]) -> Any:
        """
        Issue a single remote call.

        Args:
            method: Method name
            args: Positional arguments

        Returns:
            The decoded return value
        """
        logger.debug(f"Calling {method} with {len(args)} argument(s)")
        return decode_response(self._send(encode_call(method, args)))

    def multicall(self, calls: Sequence[Call]) -> list[Any]:
        """
        Issue several calls in one system.multicall round trip.

        Args:
            calls: Calls to make, in order

        Returns:
            One return value per call, in request order
        """
        logger.debug(f"Sending multicall with {len(calls)} call(s)")
        return decode_batch(self._send(encode_batch(list(calls))), len(calls))

    def get_torrents(self) -> list[Torrent]:
        """
        List every torrent in the main view.

        Active torrents get the modification time of their base path; the
        daemon's own timestamps say nothing about when data finished.

        Returns:
            Torrent records in daemon order
        """
        args: list[str | int] = ["", VIEW]
        args.extend(f.command for f in TORRENT_FIELDS)
        rows = self.call("d.multicall2", args)
        if not isinstance(rows, list):
            raise DecodeError(f"d.multicall2 returned {type(rows).__name__}, expected an array")

        types = tuple(f.type for f in TORRENT_FIELDS)
        decoded = [
            dict(zip((f.name for f in TORRENT_FIELDS), expect_tuple(row, types, f"torrent {i}")))
            for i, row in enumerate(rows)
        ]

        torrents = []
        for values in decoded:
            active = values["active"] == 1
            torrent = Torrent(
                info_hash=values["info_hash"],
                name=values["name"],
                created=values["created"],
                size=values["size"],
                active=active,
            )
            if active:
                torrent.path = values["path"]
                torrent.mtime = self._stat_mtime(torrent.path)
            torrents.append(torrent)

        logger.info(f"Daemon reported {len(torrents)} torrent(s)")
        return torrents

    def _stat_mtime(self, path: str) -> float:
        try:
            return os.stat(path).st_mtime
        except OSError as e:
            logger.debug(f"Cannot stat {path!r}: {e}")
            return 0.0

    def get_torrent_files(self, torrents: Sequence[Torrent]) -> None:
        """
        Load file lists for the given torrents and resolve their hard links.

        Results are matched back by position. Nothing is assigned unless the
        whole batch decodes.

        Args:
            torrents: Torrents to enrich in place
        """
        if not torrents:
            return
        calls = [Call("f.multicall", [t.info_hash, 0, "f.path="]) for t in torrents]
        results = self.multicall(calls)
        file_lists = [self._decode_files(result, t.info_hash) for result, t in zip(results, torrents)]

        for torrent, files in zip(torrents, file_lists):
            torrent.files = files
            resolve_links(torrent, self.link_counter)

    @staticmethod
    def _decode_files(result: Any, info_hash: str) -> list[str]:
        if not isinstance(result, list):
            raise DecodeError(f"f.multicall for {info_hash} returned {type(result).__name__}, expected an array")
        return [expect_tuple(row, (str,), f"file {i} of {info_hash}")[0] for i, row in enumerate(result)]

    def stop_torrents(self, torrents: Sequence[Torrent]) -> None:
        """Stop the given torrents in one round trip."""
        if not torrents:
            return
        self.multicall([Call("d.stop", [t.info_hash]) for t in torrents])
        logger.info(f"Stopped {len(torrents)} torrent(s)")

    def delete_torrents(self, torrents: Sequence[Torrent]) -> None:
        """
        Erase the given torrents from the daemon in one round trip.

        Data on disk is left alone.
        """
        if not torrents:
            return
        self.multicall([Call("d.erase", [t.info_hash]) for t in torrents])
        logger.info(f"Erased {len(torrents)} torrent(s)")
