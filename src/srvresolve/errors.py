"""Exception types raised by srvresolve.

Brief:
  ResolverError is the common base. ConfigError is raised while building a
  resolver, ExchangeError for a failed exchange with a single name server and
  NoSRVEntriesError when every server answered without SRV records.
"""

from __future__ import annotations

from typing import Optional


class ResolverError(Exception):
    """Base class for all srvresolve errors."""


class ConfigError(ResolverError):
    """Brief: Configuration could not be read, parsed or validated.

    Inputs:
      - message: Description including the offending path when known.

    Outputs:
      - Exception instance
    """


class ExchangeError(ResolverError):
    """Brief: A single query/response exchange with one name server failed.

    Inputs:
      - server: The host:port string that was queried.
      - reason: Short description of the failure.

    Outputs:
      - Exception instance exposing ``server`` and ``reason``.
    """

    def __init__(self, server: str, reason: str) -> None:
        super().__init__(f"{server}: {reason}")
        self.server = server
        self.reason = reason


class NoSRVEntriesError(ResolverError):
    """Every attempted name server answered without SRV records."""

    def __init__(self, name: Optional[str] = None) -> None:
        msg = "failed resolving hostnames for SRV entries"
        if name:
            msg = f"{msg} ({name})"
        super().__init__(msg)
        self.name = name
