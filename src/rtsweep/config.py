"""
Client configuration.

Settings are collected once into a ClientConfig and handed to the client,
either from command-line flags or from environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

DEFAULT_SOCKET = "/tmp/rtorrent.sock"
SOCKET_ENV = "RTSWEEP_SOCKET"
TIMEOUT_ENV = "RTSWEEP_TIMEOUT"


def _parse_env_float(environ: Mapping[str, str], key: str) -> float | None:
    """
    Parse a positive float from the environment.

    Args:
        environ: Environment mapping to read from
        key: Variable name

    Returns:
        The parsed value, or None when missing, invalid or not positive
    """
    raw = environ.get(key)
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    return value if value > 0 else None


class ClientConfig(BaseModel):
    """Connection settings for the rTorrent client."""

    socket: str = Field(default=DEFAULT_SOCKET, min_length=1, description="SCGI socket path or host:port")
    timeout: float | None = Field(default=None, gt=0, description="Socket timeout in seconds, None blocks")

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """
        Build a config from RTSWEEP_SOCKET and RTSWEEP_TIMEOUT.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            ClientConfig with defaults for anything unset
        """
        if environ is None:
            environ = os.environ
        socket = environ.get(SOCKET_ENV, "").strip() or DEFAULT_SOCKET
        return cls(socket=socket, timeout=_parse_env_float(environ, TIMEOUT_ENV))
