"""
Exception hierarchy for talking to the rTorrent daemon and touching torrent data on disk.
"""


class RTSweepError(Exception):
    """Base class for all rtsweep errors."""

    pass


class DaemonConnectionError(RTSweepError, ConnectionError):
    """Raised when the daemon socket cannot be reached."""

    pass


class TransportError(RTSweepError):
    """Raised when a request/response exchange breaks off mid-way."""

    pass


class ProtocolError(RTSweepError):
    """Raised when the SCGI response framing is malformed."""

    pass


class EncodeError(RTSweepError):
    """Raised when a call cannot be encoded as XML-RPC."""

    pass


class DecodeError(RTSweepError):
    """Raised when a response payload is malformed or has an unexpected shape."""

    pass


class RemoteFault(DecodeError):
    """Raised when the daemon answers a call with an XML-RPC fault."""

    def __init__(self, fault_code: int, fault_string: str, index: int | None = None) -> None:
        """
        Initialize the fault.

        Args:
            fault_code: Fault code reported by the daemon
            fault_string: Fault message reported by the daemon
            index: Position of the failing call inside a batch, if any
        """
        where = f" (call {index})" if index is not None else ""
        super().__init__(f"Remote fault {fault_code}{where}: {fault_string}")
        self.fault_code = fault_code
        self.fault_string = fault_string
        self.index = index


class FilesystemError(RTSweepError, OSError):
    """Raised when a stat or removal of torrent data fails."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
