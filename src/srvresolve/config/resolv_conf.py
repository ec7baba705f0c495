"""Read name servers from a resolv.conf-format file.

Brief:
  dnspython does the parsing; its nameserver list and port become ``host:port``
  strings in file order. Files dnspython rejects for reasons other than being
  unreadable or empty (for example malformed search directives) are re-read
  with a nameserver-only parse.

Inputs:
  - Path to a resolv.conf-format file

Outputs:
  - List of ``host:port`` strings
"""

from __future__ import annotations

import ipaddress
import logging
from typing import List

import dns.exception
import dns.resolver

from ..errors import ConfigError

logger = logging.getLogger("srvresolve.config.resolv_conf")

DEFAULT_RESOLV_CONF_PATH = "/etc/resolv.conf"
DEFAULT_DNS_PORT = 53


def _host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _parse_nameserver_lines(path: str) -> List[str]:
    """Brief: Nameserver-only parse of a resolv.conf file.

    Inputs:
      - path: Filesystem path to a resolv.conf-format file.

    Outputs:
      - List of nameserver IP strings in the order encountered; entries that
        are not IP literals are skipped.
    """

    servers: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            raw = line.split("#", 1)[0].split(";", 1)[0].strip()
            if not raw:
                continue
            parts = raw.split()
            if len(parts) >= 2 and parts[0].lower() == "nameserver":
                try:
                    ipaddress.ip_address(parts[1])
                except ValueError:
                    logger.debug("Skipping non-IP nameserver %r in %s", parts[1], path)
                    continue
                servers.append(parts[1])
    return servers


def read_resolv_conf(path: str = DEFAULT_RESOLV_CONF_PATH) -> List[str]:
    """Brief: Return the name servers of a resolv.conf file as ``host:port``.

    Inputs:
      - path: resolv.conf-format file; empty string means /etc/resolv.conf.

    Outputs:
      - Non-empty list of ``host:port`` strings (IPv6 hosts bracketed).

    Raises:
      - ConfigError when the file cannot be read or contains no usable
        nameserver entries.

    Example:
      >>> read_resolv_conf("/etc/resolv.conf")  # doctest: +SKIP
      ['10.0.0.1:53', '10.0.0.2:53']
    """

    path = path or DEFAULT_RESOLV_CONF_PATH
    r = dns.resolver.Resolver(configure=False)
    try:
        r.read_resolv_conf(path)
    except dns.resolver.NoResolverConfiguration as exc:
        raise ConfigError(f"cannot load name servers from {path}: {exc}") from exc
    except (dns.exception.DNSException, ValueError) as exc:
        logger.warning(
            "Could not fully parse %s; falling back to nameserver-only parse: %s",
            path,
            exc,
        )
        try:
            hosts = _parse_nameserver_lines(path)
        except OSError as exc2:
            raise ConfigError(f"cannot read {path}: {exc2}") from exc2
        if not hosts:
            raise ConfigError(f"no usable nameserver entries in {path}") from exc
        return [_host_port(h, DEFAULT_DNS_PORT) for h in hosts]

    servers: List[str] = []
    for ns in r.nameservers:
        # dnspython >= 2.4 returns Nameserver objects, older releases plain strings.
        host = str(getattr(ns, "address", ns))
        port = int(getattr(ns, "port", r.port) or DEFAULT_DNS_PORT)
        servers.append(_host_port(host, port))
    if not servers:
        raise ConfigError(f"no nameserver entries in {path}")
    return servers
