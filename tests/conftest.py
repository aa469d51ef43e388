"""Shared fixtures: a minimal SCGI server on a temporary UNIX socket."""

import os
import shutil
import socket
import tempfile
import threading
import xmlrpc.client
from collections.abc import Iterator

import pytest


def xml_response(value: object) -> bytes:
    """Build a methodResponse body carrying one value."""
    return xmlrpc.client.dumps((value,), methodresponse=True).encode("utf-8")


def scgi_reply(body: bytes, status: str = "200 OK") -> bytes:
    """Wrap a body the way rTorrent frames its SCGI responses."""
    head = f"Status: {status}\r\nContent-Type: text/xml\r\nContent-Length: {len(body)}\r\n\r\n"
    return head.encode("ascii") + body


def _read_request(conn: socket.socket) -> bytes:
    """Read one SCGI request and return its body."""
    data = b""
    while True:
        colon = data.find(b":")
        if colon != -1:
            header_len = int(data[:colon])
            header_end = colon + 1 + header_len
            if len(data) > header_end:
                fields = data[colon + 1 : header_end].split(b"\0")
                headers = dict(zip(fields[::2], fields[1::2]))
                content_length = int(headers[b"CONTENT_LENGTH"])
                body = data[header_end + 1 :]
                if len(body) >= content_length:
                    return body[:content_length]
        chunk = conn.recv(4096)
        if not chunk:
            return b""
        data += chunk


class FakeSCGIServer:
    """Answers each connection with the next queued raw reply and records request bodies."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.replies: list[bytes] = []
        self.requests: list[bytes] = []
        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._sock.bind(path)
        self._sock.listen(4)
        self._sock.settimeout(0.1)
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def queue(self, reply: bytes) -> None:
        self.replies.append(reply)

    def _serve(self) -> None:
        while not self._stopped.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(5)
                self.requests.append(_read_request(conn))
                if self.replies:
                    conn.sendall(self.replies.pop(0))

    def close(self) -> None:
        self._stopped.set()
        self._thread.join(timeout=2)
        self._sock.close()


@pytest.fixture
def scgi_server() -> Iterator[FakeSCGIServer]:
    """Fake daemon listening on a short temporary socket path."""
    tmpdir = tempfile.mkdtemp(prefix="rts")
    server = FakeSCGIServer(os.path.join(tmpdir, "rpc.sock"))
    try:
        yield server
    finally:
        server.close()
        shutil.rmtree(tmpdir, ignore_errors=True)
