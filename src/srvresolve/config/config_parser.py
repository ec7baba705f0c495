"""Configuration parsing for srvresolve.

Brief:
  Reads a YAML config file, validates it with a pydantic model and builds an
  SRVResolver from it. Explicit ``servers`` take precedence; otherwise name
  servers come from a resolv.conf file.

Inputs:
  - YAML config paths or already-parsed mappings

Outputs:
  - ResolverConfig models and SRVResolver instances
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..client import DNSClient, split_host_port
from ..errors import ConfigError
from ..resolver import SRVResolver, new_dns_resolver, new_dns_resolver_from_resolv_file


class ResolverConfig(BaseModel):
    """Brief: Typed configuration for an SRV resolver.

    Inputs:
      - default_ttl: Seconds substituted for zero record TTLs (>= 1).
      - servers: Optional ordered ``host:port`` name servers.
      - resolv_conf: resolv.conf path used when servers is omitted; empty
        means /etc/resolv.conf.
      - timeout_ms: Per-exchange timeout of the DNS client.
      - tcp_fallback: Retry truncated UDP answers over TCP.
      - logging: Mapping passed to init_logging.

    Outputs:
      - ResolverConfig instance with normalized field types.
    """

    default_ttl: int = Field(default=30, ge=1)
    servers: Optional[List[str]] = None
    resolv_conf: str = ""
    timeout_ms: int = Field(default=2000, ge=1)
    tcp_fallback: bool = True
    logging: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "forbid"


def read_config_file(path: str) -> Dict[str, Any]:
    """Brief: Load a YAML config file into a mapping.

    Inputs:
      - path: Path to a YAML file.

    Outputs:
      - dict: Parsed mapping; an empty document yields {}.

    Raises:
      - ConfigError when the file cannot be read, is not valid YAML or does not
        contain a mapping at the top level.
    """

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return raw


def parse_config(raw: Dict[str, Any], source: str = "<config>") -> ResolverConfig:
    """Brief: Validate a config mapping.

    Inputs:
      - raw: Mapping as produced by read_config_file (plus any overrides).
      - source: Name used in error messages.

    Outputs:
      - ResolverConfig

    Raises:
      - ConfigError wrapping pydantic validation errors.
    """

    try:
        return ResolverConfig(**raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration in {source}: {exc}") from exc


def load_config(path: str) -> ResolverConfig:
    """Read and validate a YAML config file."""
    return parse_config(read_config_file(path), source=path)


def build_resolver(
    cfg: ResolverConfig, client: Optional[DNSClient] = None
) -> SRVResolver:
    """Brief: Construct an SRVResolver described by cfg.

    Inputs:
      - cfg: Validated ResolverConfig.
      - client: Optional DNS client; by default one is built from
        cfg.timeout_ms and cfg.tcp_fallback.

    Outputs:
      - SRVResolver

    Raises:
      - ConfigError for malformed server addresses, an explicitly empty server
        list or an unusable resolv.conf.
    """

    if client is None:
        client = DNSClient(timeout_ms=cfg.timeout_ms, tcp_fallback=cfg.tcp_fallback)

    if cfg.servers is None:
        return new_dns_resolver_from_resolv_file(
            cfg.default_ttl, cfg.resolv_conf, client=client
        )

    if not cfg.servers:
        raise ConfigError("config.servers must list at least one server")
    for server in cfg.servers:
        try:
            split_host_port(server)
        except ValueError as exc:
            raise ConfigError(f"invalid server address {server!r}: {exc}") from exc
    return new_dns_resolver(cfg.default_ttl, cfg.servers, client=client)
