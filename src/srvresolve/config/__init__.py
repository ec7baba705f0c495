"""Configuration helpers: resolv.conf reading, YAML config and logging."""
