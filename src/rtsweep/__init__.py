"""
rtsweep: find and clean up torrents in a local rTorrent daemon.
"""

from .client import TORRENT_FIELDS, RTorrentClient
from .config import ClientConfig
from .errors import (
    DaemonConnectionError,
    DecodeError,
    EncodeError,
    FilesystemError,
    ProtocolError,
    RemoteFault,
    RTSweepError,
    TransportError,
)
from .hardlinks import LinkCounter, PosixLinkCounter, resolve_links
from .models import Torrent

__all__ = [
    "RTorrentClient",
    "ClientConfig",
    "Torrent",
    "TORRENT_FIELDS",
    "LinkCounter",
    "PosixLinkCounter",
    "resolve_links",
    "RTSweepError",
    "DaemonConnectionError",
    "TransportError",
    "ProtocolError",
    "EncodeError",
    "DecodeError",
    "RemoteFault",
    "FilesystemError",
]
