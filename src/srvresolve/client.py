"""Synchronous DNS client used by the SRV resolver.

Brief:
  Sends a dnslib.DNSRecord to one ``host:port`` name server over UDP and
  returns the parsed response. Truncated UDP answers are retried over TCP.
  Every failure is reported as ExchangeError so callers can treat one server's
  outcome as a single unit.

Inputs:
  - dnslib.DNSRecord queries and ``host:port`` server strings

Outputs:
  - Parsed dnslib.DNSRecord responses
"""

from __future__ import annotations

import logging
from typing import Tuple

from dnslib import DNSError, DNSRecord

from .errors import ExchangeError
from .transports.tcp import TCPError, tcp_query
from .transports.udp import UDPError, udp_query

logger = logging.getLogger("srvresolve.client")

DEFAULT_PORT = 53
DEFAULT_TIMEOUT_MS = 2000


def split_host_port(server: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Brief: Split a server address into host and port.

    Inputs:
      - server: ``host:port``, ``[v6]:port``, a bare host or a bare IPv6 literal.
      - default_port: Port used when the address carries none.

    Outputs:
      - (host, port) with IPv6 brackets removed.

    Example:
      >>> split_host_port("[2001:db8::1]:5353")
      ('2001:db8::1', 5353)
      >>> split_host_port("10.0.0.1")
      ('10.0.0.1', 53)
    """
    text = str(server).strip()
    if not text:
        raise ValueError("empty server address")

    if text.startswith("["):
        end = text.find("]")
        if end == -1:
            raise ValueError(f"unterminated IPv6 literal in {server!r}")
        host = text[1:end]
        rest = text[end + 1 :]
        if not rest:
            return host, int(default_port)
        if not rest.startswith(":"):
            raise ValueError(f"unexpected text after IPv6 literal in {server!r}")
        port_text = rest[1:]
    elif text.count(":") == 1:
        host, port_text = text.split(":", 1)
    else:
        # Bare hostname/IPv4, or an unbracketed IPv6 literal.
        return text, int(default_port)

    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid port in server address {server!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"port out of range in server address {server!r}")
    return host, port


class DNSClient:
    """Brief: Blocking DNS client with UDP transport and TCP fallback.

    Inputs:
      - timeout_ms: Per-exchange timeout in milliseconds (UDP read, TCP
        connect and TCP read each).
      - tcp_fallback: Retry over TCP when the UDP response has TC=1.

    Outputs:
      - DNSClient instance; holds no sockets between calls and is safe to share
        between threads.
    """

    def __init__(
        self, timeout_ms: int = DEFAULT_TIMEOUT_MS, tcp_fallback: bool = True
    ) -> None:
        self.timeout_ms = int(timeout_ms)
        self.tcp_fallback = bool(tcp_fallback)

    def exchange(self, query: DNSRecord, server: str) -> DNSRecord:
        """Brief: Send query to server and return the parsed response.

        Inputs:
          - query: dnslib.DNSRecord to send.
          - server: ``host:port`` of the name server.

        Outputs:
          - dnslib.DNSRecord response.

        Raises:
          - ExchangeError on transport failure, undecodable response or a
            response id that does not match the query id.
        """
        try:
            host, port = split_host_port(server)
        except ValueError as exc:
            raise ExchangeError(server, str(exc)) from exc

        wire = query.pack()
        try:
            resp = self._parse(
                server, udp_query(host, port, wire, timeout_ms=self.timeout_ms)
            )
            if self.tcp_fallback and resp.header.tc:
                logger.debug(
                    "Truncated UDP response from %s; retrying over TCP", server
                )
                resp = self._parse(
                    server,
                    tcp_query(
                        host,
                        port,
                        wire,
                        connect_timeout_ms=self.timeout_ms,
                        read_timeout_ms=self.timeout_ms,
                    ),
                )
        except (UDPError, TCPError) as exc:
            raise ExchangeError(server, str(exc)) from exc

        if resp.header.id != query.header.id:
            raise ExchangeError(
                server,
                "response id %d does not match query id %d"
                % (resp.header.id, query.header.id),
            )
        return resp

    @staticmethod
    def _parse(server: str, data: bytes) -> DNSRecord:
        try:
            return DNSRecord.parse(data)
        except DNSError as exc:
            raise ExchangeError(server, f"malformed response: {exc}") from exc
