from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "crit": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

_TAGS = {
    logging.DEBUG: "[debug]",
    logging.INFO: "[info]",
    logging.WARNING: "[warn]",
    logging.ERROR: "[error]",
    logging.CRITICAL: "[crit]",
}


def _level_tag(levelno: int) -> str:
    return _TAGS.get(levelno, f"[lvl{levelno}]")


def parse_level(value: Any, default: int = logging.INFO) -> int:
    """Brief: Map a level name such as 'warn' or 'debug' to a logging constant.

    Inputs:
      - value: Level name (case-insensitive); unknown names yield default.
      - default: Fallback level.

    Outputs:
      - int logging level.
    """
    return _LEVELS.get(str(value).strip().lower(), default)


class SyslogFormatter(logging.Formatter):
    """Formatter for syslog output without timestamps (syslog adds its own)."""

    def __init__(self, tag: str = "") -> None:
        super().__init__()
        self._prefix = f"{tag}: " if tag else ""

    def format(self, record):
        """Add level_tag attribute and format without timestamp."""
        record.level_tag = _level_tag(record.levelno)
        return f"{self._prefix}{record.level_tag} {record.name}: {record.getMessage()}"


class BracketLevelFormatter(logging.Formatter):
    """Custom formatter that adds bracketed lowercase level tags and UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        """Format the record's creation time as UTC ISO-8601 with Z suffix."""
        return datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )

    def format(self, record):
        """Add level_tag attribute and format the record."""
        record.level_tag = _level_tag(record.levelno)
        return super().format(record)


def _syslog_handler(syslog_cfg: Any) -> logging.Handler:
    if isinstance(syslog_cfg, dict):
        address = syslog_cfg.get("address", "/dev/log")
        if isinstance(address, list):
            address = tuple(address)
        facility = getattr(
            logging.handlers.SysLogHandler,
            f"LOG_{str(syslog_cfg.get('facility', 'USER')).upper()}",
            logging.handlers.SysLogHandler.LOG_USER,
        )
        tag = str(syslog_cfg.get("tag", "srvresolve"))
    else:
        address = "/dev/log"
        facility = logging.handlers.SysLogHandler.LOG_USER
        tag = "srvresolve"

    handler = logging.handlers.SysLogHandler(address=address, facility=facility)
    handler.setFormatter(SyslogFormatter(tag=tag))
    return handler


def init_logging(cfg: Optional[Dict[str, Any]]) -> None:
    """
    Initialize logging configuration based on the provided config.

    Args:
        cfg: Logging configuration dictionary with optional keys:
            - level: debug, info, warn, error, crit (default: warn)
            - stderr: boolean to log to stderr (default: True)
            - file: string path to log file (optional)
            - syslog: boolean or dict to enable syslog logging (optional)
                Can be a boolean (True uses defaults) or a dict with:
                - address: Unix socket path (default: /dev/log) or [host, port]
                - facility: syslog facility (default: USER)
                - tag: program identifier to prepend (default: srvresolve)

    Example config:
        {
            "level": "debug",
            "stderr": True,
            "file": "./srvresolve.log",
        }
    """
    cfg = cfg or {}

    level = parse_level(cfg.get("level", "warn"), logging.WARNING)
    formatter = BracketLevelFormatter(
        fmt="%(asctime)s %(level_tag)s %(name)s: %(message)s"
    )

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    if cfg.get("stderr", True):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    file_path = cfg.get("file")
    if isinstance(file_path, str) and file_path.strip():
        path = os.path.abspath(os.path.expanduser(file_path.strip()))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    syslog_cfg = cfg.get("syslog")
    if syslog_cfg:
        try:
            root.addHandler(_syslog_handler(syslog_cfg))
        except (
            OSError,
            ValueError,
        ) as e:  # pragma: no cover - environment-specific: no syslog socket available
            root.warning("Failed to configure syslog: %s", e)

    logging.captureWarnings(True)
