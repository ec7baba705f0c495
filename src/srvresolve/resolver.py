"""SRV-based service resolver.

Brief:
  Resolves a service name into dialable ``host:port`` targets by asking an
  ordered list of name servers for SRV records. Servers are tried one after
  another; the first non-empty answer wins. Addresses from the additional
  section replace SRV target hostnames when present, and zero TTLs are raised
  to the configured default so every target can be scheduled for refresh.

Inputs:
  - default TTL (seconds) and a list of ``host:port`` name servers

Outputs:
  - SRVResolver.lookup(name) -> List[Target]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dnslib import QTYPE, DNSRecord

from .client import DNSClient
from .config.resolv_conf import DEFAULT_RESOLV_CONF_PATH, read_resolv_conf
from .errors import ExchangeError, NoSRVEntriesError

logger = logging.getLogger("srvresolve.resolver")


@dataclass(frozen=True)
class Target:
    """Brief: A dialable endpoint produced by a lookup.

    Inputs:
      - dial_addr: ``host-or-ip:port`` string ready for connect().
      - ttl: How long the target stays valid; always > 0.

    Outputs:
      - Immutable Target value.
    """

    dial_addr: str
    ttl: timedelta


def fqdn(name: str) -> str:
    """Return name with a trailing dot appended when missing."""
    return name if name.endswith(".") else name + "."


def _format_dial_addr(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _address_map(additional: Iterable) -> Dict[str, str]:
    """Brief: Map owner names to literal IPs from the additional section.

    Inputs:
      - additional: Resource records from a response's additional section.

    Outputs:
      - dict lowercase owner name (with trailing dot) -> IP string. For names
        with several A records the last one wins; AAAA records only fill in
        names that have no A record.
    """
    v4: Dict[str, str] = {}
    v6: Dict[str, str] = {}
    for rr in additional:
        if rr.rtype == QTYPE.A:
            v4[str(rr.rname).lower()] = str(rr.rdata)
        elif rr.rtype == QTYPE.AAAA:
            v6[str(rr.rname).lower()] = str(rr.rdata)
    return {**v6, **v4}


class SRVResolver:
    """Brief: Resolve service names to targets via SRV queries with fallback.

    Inputs:
      - default_ttl: Seconds used for records whose TTL is 0; must be >= 1.
      - servers: Ordered ``host:port`` name servers, used as given.
      - client: Object with ``exchange(query, server) -> DNSRecord``; defaults
        to a DNSClient.

    Outputs:
      - SRVResolver instance. Configuration is fixed after construction, so an
        instance may be shared between threads when its client can be.
    """

    def __init__(
        self,
        default_ttl: int,
        servers: Sequence[str],
        client: Optional[DNSClient] = None,
    ) -> None:
        if int(default_ttl) < 1:
            raise ValueError("default_ttl must be at least 1 second")
        self._default_ttl = int(default_ttl)
        self._servers = tuple(str(s) for s in servers)
        self._client = client if client is not None else DNSClient()

    @property
    def servers(self) -> Tuple[str, ...]:
        return self._servers

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def lookup(self, name: str) -> List[Target]:
        """Brief: Resolve name into targets, trying servers in order.

        Inputs:
          - name: Service name, e.g. ``_http._tcp.svc.internal``; need not be
            fully qualified.

        Outputs:
          - Non-empty list of Target in answer order.

        Raises:
          - ExchangeError from the last server tried, when that server failed.
          - NoSRVEntriesError when no server produced any SRV record and the
            last server tried did not fail.
          - ValueError for an empty name, or UnicodeError (a ValueError) for
            names with empty or over-long labels.
        """
        if not name:
            raise ValueError("service name must not be empty")

        last_error: Optional[ExchangeError] = None
        targets: List[Target] = []
        for server in self._servers:
            try:
                found = self.query_one(server, name)
            except ExchangeError as exc:
                logger.debug("SRV lookup of %s via %s failed: %s", name, server, exc)
                last_error = exc
                continue

            # Only the outcome of the most recent server counts.
            last_error = None
            if found:
                targets = found
                break
            logger.debug("No SRV records for %s from %s, trying next", name, server)

        if last_error is not None:
            logger.warning(
                "SRV lookup of %s failed; last server error: %s", name, last_error
            )
            raise last_error
        if not targets:
            raise NoSRVEntriesError(name)
        return targets

    def query_one(self, server: str, name: str) -> List[Target]:
        """Brief: Ask one server for SRV records of name and build targets.

        Inputs:
          - server: ``host:port`` of the name server.
          - name: Service name.

        Outputs:
          - List of Target, empty when the answer section is empty.

        Raises:
          - ExchangeError when the exchange itself fails.
        """
        query = DNSRecord.question(fqdn(name), "SRV")
        resp = self._client.exchange(query, server)

        answers = resp.rr or []
        if not answers:
            return []

        addresses = _address_map(resp.ar or [])
        targets: List[Target] = []
        for rr in answers:
            if rr.rtype != QTYPE.SRV:
                continue
            srv = rr.rdata
            host = str(srv.target)
            ip = addresses.get(host.lower())
            dial_addr = _format_dial_addr(ip if ip else host, srv.port)

            # Load balancer updates need ttl > 0.
            ttl = rr.ttl if rr.ttl else self._default_ttl
            targets.append(Target(dial_addr=dial_addr, ttl=timedelta(seconds=ttl)))
        return targets


def new_dns_resolver(
    default_ttl: int, servers: Sequence[str], client: Optional[DNSClient] = None
) -> SRVResolver:
    """Build an SRVResolver from an explicit list of ``host:port`` servers."""
    return SRVResolver(default_ttl, servers, client=client)


def new_dns_resolver_from_resolv_file(
    default_ttl: int, path: str = "", client: Optional[DNSClient] = None
) -> SRVResolver:
    """Brief: Build an SRVResolver from the name servers of a resolv.conf file.

    Inputs:
      - default_ttl: Seconds used for records whose TTL is 0.
      - path: resolv.conf-format file; empty means /etc/resolv.conf.
      - client: Optional DNS client.

    Outputs:
      - SRVResolver over the file's name servers, in file order.

    Raises:
      - ConfigError when the file cannot be read or lists no name servers.
    """
    resolv_path = path or DEFAULT_RESOLV_CONF_PATH
    servers = read_resolv_conf(resolv_path)
    logger.debug("Using name servers %s from %s", servers, resolv_path)
    return SRVResolver(default_ttl, servers, client=client)
