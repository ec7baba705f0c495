import socket
import time
from typing import Optional, Tuple


class UDPError(Exception):
    """
    Brief: DNS-over-UDP transport error.

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """

    pass


def _resolve_server(host: str, port: int) -> Tuple[int, tuple]:
    """Brief: Resolve a server host/port to a socket family and address.

    Inputs:
    - host: IPv4/IPv6 literal or hostname
    - port: UDP port

    Outputs:
    - (family, sockaddr) of the first datagram-capable address
    """
    infos = socket.getaddrinfo(host, int(port), type=socket.SOCK_DGRAM)
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr


def udp_query(
    host: str,
    port: int,
    query: bytes,
    *,
    timeout_ms: int = 2000,
    source_ip: Optional[str] = None,
) -> bytes:
    """
    Brief: Perform a single UDP DNS query.

    Inputs:
    - host: name server host/IP
    - port: name server UDP port
    - query: wire-format DNS query bytes
    - timeout_ms: overall timeout in milliseconds
    - source_ip: optional source address to bind

    Outputs:
    - bytes: first datagram received from host:port. Datagrams from any other
      address are discarded and do not extend the timeout.

    Example:
        >>> try:
        ...     udp_query('127.0.0.1', 53, b'\x00\x01')
        ... except UDPError:
        ...     pass
    """
    try:
        family, server_addr = _resolve_server(host, port)
        s = socket.socket(family, socket.SOCK_DGRAM)
        try:
            if source_ip:
                s.bind((source_ip, 0))
            deadline = time.monotonic() + timeout_ms / 1000.0
            s.sendto(query, server_addr)
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise socket.timeout("timed out")
                s.settimeout(remaining)
                data, peer = s.recvfrom(65535)
                if peer[:2] == server_addr[:2]:
                    return data
        finally:
            s.close()
    except OSError as e:
        raise UDPError(f"UDP error: {e}") from e
