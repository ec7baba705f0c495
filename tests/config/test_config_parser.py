"""
Brief: Tests for YAML config loading, validation and resolver construction.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from srvresolve.client import DNSClient
from srvresolve.config.config_parser import (
    ResolverConfig,
    build_resolver,
    load_config,
    parse_config,
    read_config_file,
)
from srvresolve.errors import ConfigError


def test_load_config_full(tmp_path):
    path = tmp_path / "srvresolve.yaml"
    path.write_text(
        "default_ttl: 45\n"
        "servers:\n"
        "  - 10.0.0.1:53\n"
        "  - '[2001:db8::1]:53'\n"
        "timeout_ms: 500\n"
        "tcp_fallback: false\n"
        "logging:\n"
        "  level: debug\n"
    )
    cfg = load_config(str(path))
    assert cfg.default_ttl == 45
    assert cfg.servers == ["10.0.0.1:53", "[2001:db8::1]:53"]
    assert cfg.timeout_ms == 500
    assert cfg.tcp_fallback is False
    assert cfg.logging == {"level": "debug"}


def test_defaults():
    cfg = parse_config({})
    assert cfg.default_ttl == 30
    assert cfg.servers is None
    assert cfg.resolv_conf == ""
    assert cfg.timeout_ms == 2000
    assert cfg.tcp_fallback is True


def test_empty_yaml_document_is_empty_mapping(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert read_config_file(str(path)) == {}


@pytest.mark.parametrize(
    "raw", [{"default_ttl": 0}, {"timeout_ms": 0}, {"unknown_key": 1}]
)
def test_invalid_values_rejected(raw):
    with pytest.raises(ConfigError):
        parse_config(raw)


def test_unreadable_and_malformed_files(tmp_path):
    with pytest.raises(ConfigError):
        read_config_file(str(tmp_path / "missing.yaml"))

    bad = tmp_path / "bad.yaml"
    bad.write_text("servers: [unclosed\n")
    with pytest.raises(ConfigError):
        read_config_file(str(bad))

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just a string\n")
    with pytest.raises(ConfigError):
        read_config_file(str(scalar))


def test_build_resolver_from_servers():
    cfg = ResolverConfig(default_ttl=12, servers=["10.0.0.1:53", "10.0.0.2:53"])
    resolver = build_resolver(cfg)
    assert resolver.servers == ("10.0.0.1:53", "10.0.0.2:53")
    assert resolver.default_ttl == 12


def test_build_resolver_uses_client_settings():
    cfg = ResolverConfig(servers=["10.0.0.1:53"], timeout_ms=321, tcp_fallback=False)
    resolver = build_resolver(cfg)
    client = resolver._client
    assert isinstance(client, DNSClient)
    assert client.timeout_ms == 321
    assert client.tcp_fallback is False


def test_build_resolver_from_resolv_conf(tmp_path):
    path = tmp_path / "resolv.conf"
    path.write_text("nameserver 192.0.2.1\n")
    resolver = build_resolver(ResolverConfig(resolv_conf=str(path)))
    assert resolver.servers == ("192.0.2.1:53",)


def test_build_resolver_rejects_bad_servers(tmp_path):
    with pytest.raises(ConfigError):
        build_resolver(ResolverConfig(servers=[]))
    with pytest.raises(ConfigError):
        build_resolver(ResolverConfig(servers=["10.0.0.1:abc"]))
    with pytest.raises(ConfigError):
        build_resolver(ResolverConfig(resolv_conf=str(tmp_path / "missing")))
