from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional, TextIO

from .config.config_parser import build_resolver, parse_config, read_config_file
from .config.logging_config import init_logging
from .errors import ConfigError, ResolverError
from .resolver import SRVResolver, Target

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_LOOKUP = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="srvresolve",
        description="Resolve service names to dialable targets via DNS SRV records",
    )
    parser.add_argument("names", nargs="+", metavar="NAME", help="Service name(s)")
    parser.add_argument("--config", help="Path to YAML config")
    parser.add_argument(
        "--server",
        action="append",
        dest="servers",
        metavar="HOST:PORT",
        help="Name server to query; repeat to add fallbacks (tried in order)",
    )
    parser.add_argument(
        "--resolv-conf",
        help="resolv.conf file to read name servers from when no --server is given",
    )
    parser.add_argument(
        "--default-ttl",
        type=int,
        help="TTL in seconds substituted for records with TTL 0",
    )
    parser.add_argument("--timeout-ms", type=int, help="Per-server query timeout")
    parser.add_argument(
        "--log-level", help="Log level: debug, info, warn, error, crit"
    )
    return parser


def _merge_overrides(raw: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Brief: Apply command-line flags on top of the config file mapping.

    Inputs:
      - raw: Mapping read from the config file (or {}).
      - args: Parsed command-line namespace.

    Outputs:
      - New mapping where every flag that was given replaces the file value.
    """
    merged = dict(raw)
    if args.servers:
        merged["servers"] = list(args.servers)
    if args.resolv_conf is not None:
        merged["resolv_conf"] = args.resolv_conf
    if args.default_ttl is not None:
        merged["default_ttl"] = args.default_ttl
    if args.timeout_ms is not None:
        merged["timeout_ms"] = args.timeout_ms
    if args.log_level is not None:
        merged["logging"] = {**(merged.get("logging") or {}), "level": args.log_level}
    return merged


def format_target(target: Target) -> str:
    """Render a target as 'dial_addr ttl_seconds'."""
    return f"{target.dial_addr} {int(target.ttl.total_seconds())}"


def main(
    argv: Optional[List[str]] = None,
    resolver: Optional[SRVResolver] = None,
    out: Optional[TextIO] = None,
) -> int:
    """
    Entry point for the srvresolve command.

    Inputs:
      - argv: Command-line arguments (defaults to sys.argv[1:]).
      - resolver: Optional prebuilt resolver; skips building one from config.
      - out: Stream for results (defaults to sys.stdout).

    Outputs:
      - int exit code: 0 when every name resolved, 1 on configuration errors,
        2 when at least one lookup failed.

    Example:
      >>> main(["--server", "10.0.0.1:53", "_http._tcp.svc.internal"])  # doctest: +SKIP
      10.1.1.5:8080 30
      0
    """
    args = _build_parser().parse_args(argv)
    out = out or sys.stdout

    try:
        raw = read_config_file(args.config) if args.config else {}
        cfg = parse_config(_merge_overrides(raw, args), source=args.config or "<args>")
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_CONFIG

    init_logging(cfg.logging)
    logger = logging.getLogger("srvresolve.main")
    if args.config:
        logger.info("Loaded config from %s", args.config)

    if resolver is None:
        try:
            resolver = build_resolver(cfg)
        except ConfigError as exc:
            logger.error("%s", exc)
            return EXIT_CONFIG
    logger.debug("Name servers: %s", ", ".join(resolver.servers))

    status = EXIT_OK
    for name in args.names:
        if len(args.names) > 1:
            print(f"; {name}", file=out)
        try:
            targets = resolver.lookup(name)
        except (ResolverError, ValueError) as exc:
            # ValueError covers empty names and labels dnslib cannot encode.
            logger.error("Lookup of %r failed: %s", name, exc)
            status = EXIT_LOOKUP
            continue
        for target in targets:
            print(format_target(target), file=out)
    return status


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
