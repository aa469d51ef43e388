"""
SCGI transport for the rTorrent daemon.
Sends one framed request per connection and returns the response body.
"""

import logging
import socket
import urllib.parse

from .errors import DaemonConnectionError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

RECV_SIZE = 4096


def parse_endpoint(address: str) -> tuple[int, str | tuple[str, int]]:
    """
    Work out the socket family and address for an endpoint string.

    Args:
        address: Filesystem path, "host:port" or "scgi://host:port"

    Returns:
        Tuple of (address family, socket address)
    """
    if address.startswith("scgi://"):
        parsed = urllib.parse.urlparse(address)
        if not parsed.hostname or parsed.port is None:
            raise DaemonConnectionError(f"Invalid SCGI address: {address}")
        return socket.AF_INET, (parsed.hostname, parsed.port)

    if "/" not in address:
        host, sep, port = address.rpartition(":")
        if sep and host and port.isdigit():
            return socket.AF_INET, (host, int(port))

    return socket.AF_UNIX, address


def _connect(address: str, timeout: float | None) -> socket.socket:
    """Open a connected socket to the endpoint."""
    family, sockaddr = parse_endpoint(address)
    if family == socket.AF_INET:
        host, port = sockaddr  # type: ignore[misc]
        try:
            return socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise DaemonConnectionError(f"Cannot connect to {address}: {e}") from e

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.settimeout(timeout)
    try:
        sock.connect(sockaddr)
    except OSError as e:
        sock.close()
        raise DaemonConnectionError(f"Cannot connect to {address}: {e}") from e
    return sock


def encode_request(body: bytes) -> bytes:
    """
    Frame a request body as an SCGI request.

    The header block is a netstring of NUL-separated name/value pairs and
    CONTENT_LENGTH must come first.

    Args:
        body: Request payload

    Returns:
        Complete request bytes
    """
    headers = (
        ("CONTENT_LENGTH", str(len(body))),
        ("SCGI", "1"),
        ("REQUEST_METHOD", "POST"),
        ("REQUEST_URI", "/RPC2"),
    )
    block = b"".join(name.encode("ascii") + b"\0" + value.encode("ascii") + b"\0" for name, value in headers)
    return str(len(block)).encode("ascii") + b":" + block + b"," + body


def _split_headers(data: bytes) -> tuple[dict[str, str], bytes] | None:
    """Split a CGI-style response into headers and the start of the body, if complete."""
    for terminator in (b"\r\n\r\n", b"\n\n"):
        head, sep, rest = data.partition(terminator)
        if sep:
            break
    else:
        return None

    headers: dict[str, str] = {}
    for line in head.decode("latin-1").splitlines():
        name, colon, value = line.partition(":")
        if not colon:
            raise ProtocolError(f"Malformed response header line: {line!r}")
        headers[name.strip().lower()] = value.strip()
    return headers, rest


def decode_response(data: bytes) -> bytes:
    """
    Extract the body from a complete SCGI response.

    Args:
        data: Raw bytes read from the daemon

    Returns:
        Response body, truncated to Content-Length
    """
    split = _split_headers(data)
    if split is None:
        raise ProtocolError("Response is missing the header terminator")
    headers, body = split

    status = headers.get("status")
    if status is not None and not status.startswith("200"):
        raise ProtocolError(f"Daemon returned status {status}")

    raw_length = headers.get("content-length")
    if raw_length is None:
        raise ProtocolError("Response is missing Content-Length")
    try:
        length = int(raw_length)
    except ValueError as e:
        raise ProtocolError(f"Invalid Content-Length: {raw_length!r}") from e
    if length < 0:
        raise ProtocolError(f"Invalid Content-Length: {raw_length!r}")

    if len(body) < length:
        raise ProtocolError(f"Response body truncated: expected {length} bytes, got {len(body)}")
    return body[:length]


def _header_end(data: bytearray) -> int | None:
    """Get the offset just past the header terminator, None if it has not arrived."""
    for terminator in (b"\r\n\r\n", b"\n\n"):
        end = data.find(terminator)
        if end != -1:
            return end + len(terminator)
    return None


def _declared_size(data: bytearray, header_end: int) -> int | None:
    """Get the total response size the headers announce, None if they give no usable length."""
    try:
        split = _split_headers(bytes(data[:header_end]))
    except ProtocolError:
        return None
    if split is None:
        return None
    raw_length = split[0].get("content-length", "")
    return header_end + int(raw_length) if raw_length.isdigit() else None


def send(address: str, payload: bytes, timeout: float | None = None) -> bytes:
    """
    Perform one SCGI exchange with the daemon.

    Args:
        address: Socket path or host:port of the daemon
        payload: Request body (an XML-RPC document)
        timeout: Socket timeout in seconds, None blocks

    Returns:
        Raw response body
    """
    sock = _connect(address, timeout)
    try:
        try:
            sock.sendall(encode_request(payload))
        except OSError as e:
            raise TransportError(f"Failed to write request to {address}: {e}") from e

        data = bytearray()
        header_end = None
        expected = None
        while expected is None or len(data) < expected:
            try:
                chunk = sock.recv(RECV_SIZE)
            except OSError as e:
                raise TransportError(f"Failed to read response from {address}: {e}") from e
            if not chunk:
                break
            data += chunk
            if header_end is None:
                header_end = _header_end(data)
                if header_end is not None:
                    expected = _declared_size(data, header_end)
    finally:
        sock.close()

    logger.debug(f"SCGI {address}: sent {len(payload)} bytes, received {len(data)} bytes")
    return decode_response(bytes(data))
