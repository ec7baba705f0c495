"""srvresolve package

Resolve service names to dialable ``host:port`` targets through DNS SRV
records with ordered name-server fallback.
"""

from .client import DNSClient
from .errors import ConfigError, ExchangeError, NoSRVEntriesError, ResolverError
from .resolver import (
    SRVResolver,
    Target,
    new_dns_resolver,
    new_dns_resolver_from_resolv_file,
)

__all__ = [
    "ConfigError",
    "DNSClient",
    "ExchangeError",
    "NoSRVEntriesError",
    "ResolverError",
    "SRVResolver",
    "Target",
    "new_dns_resolver",
    "new_dns_resolver_from_resolv_file",
]
