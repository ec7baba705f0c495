"""
Brief: Unit tests for the TCP transport using a local threaded TCP stub.

Inputs:
  - None

Outputs:
  - None
"""

import socket
import threading
import time

import pytest

from srvresolve.transports.tcp import TCPError, tcp_query


def _recv_exact(sock: socket.socket, n: int) -> bytes:
    data = b""
    while len(data) < n:
        chunk = sock.recv(n - len(data))
        if not chunk:
            break
        data += chunk
    return data


class _TCPStub:
    """Echo server speaking length-prefixed framing; short_reply truncates bodies."""

    def __init__(self, short_reply=False):
        self.short_reply = short_reply
        self.sock = socket.socket()
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(5)
        self.addr = self.sock.getsockname()
        self._stop = False
        self.thread = threading.Thread(target=self._loop, daemon=True)

    def start(self):
        self.thread.start()
        time.sleep(0.02)

    def _loop(self):
        while not self._stop:
            try:
                self.sock.settimeout(0.2)
                conn, _ = self.sock.accept()
            except OSError:
                continue
            t = threading.Thread(target=self._conn, args=(conn,), daemon=True)
            t.start()

    def _conn(self, conn: socket.socket):
        with conn:
            try:
                hdr = _recv_exact(conn, 2)
                if len(hdr) != 2:
                    return
                ln = int.from_bytes(hdr, "big")
                body = _recv_exact(conn, ln)
                if self.short_reply:
                    conn.sendall((ln + 10).to_bytes(2, "big") + body)
                    return
                conn.sendall(ln.to_bytes(2, "big") + body)
            except OSError:
                return

    def close(self):
        self._stop = True
        self.sock.close()


@pytest.fixture
def tcp_stub():
    s = _TCPStub()
    s.start()
    try:
        yield s
    finally:
        s.close()


def test_tcp_query_roundtrip(tcp_stub):
    q = b"\xab\xcd" + b"x" * 300
    resp = tcp_query(tcp_stub.addr[0], tcp_stub.addr[1], q)
    assert resp == q


def test_tcp_query_short_body_raises():
    stub = _TCPStub(short_reply=True)
    stub.start()
    try:
        with pytest.raises(TCPError) as ei:
            tcp_query(stub.addr[0], stub.addr[1], b"\x01\x02\x03")
        assert "short read" in str(ei.value)
    finally:
        stub.close()


def test_tcp_query_connection_refused():
    # Grab a free port and release it so nothing is listening there.
    s = socket.socket()
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()

    with pytest.raises(TCPError) as ei:
        tcp_query("127.0.0.1", port, b"\x12\x34", connect_timeout_ms=200)
    assert "Network error" in str(ei.value)
