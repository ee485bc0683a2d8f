"""Config loading & normalization entrypoint.

Responsibilities:
  * Load the YAML configuration file.
  * Apply defaults for optional keys (host, bind, timeout).
  * Apply environment overrides (a local .env file is honored).
  * Validate required credentials and the bind address.

Environment overrides (take precedence over the file):
  BITCOIN_EXPORTER_HOST      -> RPC endpoint URL
  BITCOIN_EXPORTER_USER      -> RPC user
  BITCOIN_EXPORTER_PASSWORD  -> RPC password
  BITCOIN_EXPORTER_BIND      -> scrape server host:port
  BITCOIN_EXPORTER_TIMEOUT   -> RPC HTTP timeout (seconds)

Public API:
  load_config(path) -> Config
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from ..utils.env_flags import get_float, get_str
from ..utils.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "/etc/bitcoin-explorer/config.yaml"
DEFAULT_HOST = "http://127.0.0.1:8332"
DEFAULT_BIND = "127.0.0.1:9898"
DEFAULT_TIMEOUT = 30.0

ENV_PREFIX = "BITCOIN_EXPORTER_"


@dataclass(frozen=True)
class Config:
    user: str
    password: str
    host: str = DEFAULT_HOST
    bind: str = DEFAULT_BIND
    timeout: float = DEFAULT_TIMEOUT

    def bind_address(self) -> tuple[str, int]:
        return parse_bind(self.bind)

    def redacted(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "user": self.user,
            "password": "***",
            "bind": self.bind,
            "timeout": self.timeout,
        }


def parse_bind(bind: str) -> tuple[str, int]:
    """Split 'host:port' (IPv6 hosts may be bracketed) into a socket address."""
    host, sep, port_s = bind.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"bind must be host:port, got {bind!r}")
    try:
        port = int(port_s)
    except ValueError:
        raise ConfigError(f"bind port is not a number: {bind!r}") from None
    if not 1 <= port <= 65535:
        raise ConfigError(f"bind port must be between 1 and 65535, got {port}")
    return host.strip("[]"), port


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        fh = path.open(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Can't open {path}") from e
    with fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as e:
            raise ConfigError(f"Can't read {path}: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Can't read {path}: top-level value must be a mapping")
    return raw


def _from_mapping(raw: dict[str, Any], source: str) -> Config:
    missing = [k for k in ("user", "password") if raw.get(k) in (None, "")]
    if missing:
        raise ConfigError(f"Can't read {source}: missing {', '.join(missing)}")
    try:
        timeout = float(raw.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        raise ConfigError(f"Can't read {source}: timeout must be a number") from None
    if timeout <= 0:
        raise ConfigError(f"Can't read {source}: timeout must be > 0")
    return Config(
        user=str(raw["user"]),
        password=str(raw["password"]),
        host=str(raw.get("host") or DEFAULT_HOST),
        bind=str(raw.get("bind") or DEFAULT_BIND),
        timeout=timeout,
    )


def _env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    merged = dict(raw)
    for key in ("host", "user", "password", "bind"):
        v = get_str(ENV_PREFIX + key.upper())
        if v is not None:
            merged[key] = v
    t = get_float(ENV_PREFIX + "TIMEOUT")
    if t is not None:
        merged["timeout"] = t
    return merged


def load_config(path: str | os.PathLike[str] = DEFAULT_CONFIG_PATH, *, use_env: bool = True) -> Config:
    if use_env:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    p = Path(path)
    raw = _read_yaml(p)
    if use_env:
        raw = _env_overrides(raw)
    cfg = _from_mapping(raw, str(p))
    parse_bind(cfg.bind)
    logger.debug("Loaded config from %s: %s", p, cfg.redacted())
    return cfg


__all__ = ["Config", "ConfigError", "DEFAULT_CONFIG_PATH", "load_config", "parse_bind"]
