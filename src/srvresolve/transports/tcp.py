import socket


class TCPError(Exception):
    """
    A DNS-over-TCP transport error.

    Inputs:
      - message: Error description.
    Outputs:
      - Exception instance.

    Brief: Raised for connect/read/write or framing errors.
    """

    pass


def tcp_query(
    host: str,
    port: int,
    query: bytes,
    *,
    connect_timeout_ms: int = 1000,
    read_timeout_ms: int = 1500,
) -> bytes:
    """
    Perform a single DNS-over-TCP query to host:port using length-prefixed framing (RFC 7766).

    Inputs:
      - host: Name server host/IP.
      - port: Name server TCP port (53 typically).
      - query: Wire-format DNS query bytes.
      - connect_timeout_ms: TCP connect timeout.
      - read_timeout_ms: Read timeout per operation.
    Outputs:
      - bytes: Wire-format DNS response.

    Example:
      >>> resp = tcp_query('10.0.0.1', 53, b'\x12\x34...')
    """
    payload = len(query).to_bytes(2, byteorder="big") + query
    try:
        sock = socket.create_connection(
            (host, port), timeout=connect_timeout_ms / 1000.0
        )
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            sock.settimeout(read_timeout_ms / 1000.0)
            sock.sendall(payload)
            hdr = _recv_exact(sock, 2)
            if len(hdr) != 2:
                raise TCPError("short read on length header")
            resp_len = int.from_bytes(hdr, byteorder="big")
            resp = _recv_exact(sock, resp_len)
            if len(resp) != resp_len:
                raise TCPError("short read on body")
            return resp
        finally:
            sock.close()
    except OSError as e:
        raise TCPError(f"Network error: {e}") from e


def _recv_exact(sock: socket.socket, n: int) -> bytes:
    """
    Receive exactly n bytes from a blocking socket.

    Inputs:
      - sock: Socket
      - n: Number of bytes
    Outputs:
      - bytes: Exactly n bytes unless EOF occurs.
    """
    remaining = n
    chunks = []
    while remaining > 0:
        chunk = sock.recv(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
