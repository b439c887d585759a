"""Configuration module — frozen dataclass loaded from YAML, CLI args and env vars."""

import argparse
import logging
import os
from dataclasses import dataclass, fields

import yaml

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class Config:
    listen_addr: str = "0.0.0.0:5000"
    elasticsearch_addr: str = "127.0.0.1:9200"
    queue_size: int = 10000
    buffer_size: int = 32768
    request_timeout: float | None = None
    dashboard_port: int = 0
    log_level: str = "INFO"


# field name -> (flag, env var)
_SOURCES = {
    "listen_addr": ("--listen", "LISTEN_ADDR"),
    "elasticsearch_addr": ("--elasticsearch", "ELASTICSEARCH_ADDR"),
    "queue_size": ("--queue-size", "QUEUE_SIZE"),
    "buffer_size": ("--buffer-size", "BUFFER_SIZE"),
    "request_timeout": ("--request-timeout", "REQUEST_TIMEOUT"),
    "dashboard_port": ("--dashboard-port", "DASHBOARD_PORT"),
    "log_level": ("--log-level", "LOG_LEVEL"),
}


def parse_address(addr: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6]:port``) into a host and integer port."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port:
        raise ConfigError(f"address {addr!r} is missing a port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigError(f"IPv6 address {addr!r} must be written as [host]:port")
    try:
        port_num = int(port)
    except ValueError:
        raise ConfigError(f"invalid port in address {addr!r}") from None
    if not 0 <= port_num <= 65535:
        raise ConfigError(f"port out of range in address {addr!r}")
    return host, port_num


def format_address(host: str, port: int) -> str:
    """Inverse of parse_address; brackets IPv6 hosts."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path or file."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ship UDP log datagrams to Elasticsearch")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--listen", default=None, help="hostname:port of listen address")
    parser.add_argument("--elasticsearch", default=None, help="hostname:port of elasticsearch")
    parser.add_argument("--queue-size", default=None, help="capacity of the event queue")
    parser.add_argument("--buffer-size", default=None, help="maximum datagram size in bytes")
    parser.add_argument("--request-timeout", default=None,
                        help="seconds before an HTTP request is abandoned (default: never)")
    parser.add_argument("--dashboard-port", default=None, help="port for the stats dashboard (0 disables)")
    parser.add_argument("--log-level", default=None, help="logging level")
    return parser


def _coerce(name: str, value) -> object:
    """Convert a raw value from YAML, argv or env to the field's type."""
    try:
        if name in ("queue_size", "buffer_size", "dashboard_port"):
            return int(value)
        if name == "request_timeout":
            if value is None or str(value).strip().lower() in ("", "none", "0"):
                return None
            return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"invalid value for {name}: {value!r}") from None
    return str(value)


def _validate(cfg: Config) -> Config:
    parse_address(cfg.listen_addr)
    parse_address(cfg.elasticsearch_addr)
    if cfg.queue_size < 1:
        raise ConfigError("queue_size must be at least 1")
    if cfg.buffer_size < 1:
        raise ConfigError("buffer_size must be at least 1")
    if cfg.request_timeout is not None and cfg.request_timeout < 0:
        raise ConfigError("request_timeout must not be negative")
    if not 0 <= cfg.dashboard_port <= 65535:
        raise ConfigError("dashboard_port out of range")
    if not isinstance(logging.getLevelName(cfg.log_level.upper()), int):
        raise ConfigError(f"unknown log level {cfg.log_level!r}")
    return cfg


def load_config(argv: list[str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- CLI args <- env vars.

    Environment variables are applied after flag parsing, so a non-empty
    ``LISTEN_ADDR`` wins over ``--listen``. Pass argv for testability; when
    None, argparse reads sys.argv.
    """
    args = _build_parser().parse_args(argv)
    known = {f.name for f in fields(Config)}

    kwargs: dict = {}
    yaml_data = load_yaml_config(args.config or os.environ.get("CONFIG_PATH"))
    for key, value in yaml_data.items():
        key = key.replace("-", "_")
        if key not in known:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        kwargs[key] = _coerce(key, value)

    for name, (flag, env_var) in _SOURCES.items():
        cli_value = getattr(args, flag[2:].replace("-", "_"))
        if cli_value is not None:
            kwargs[name] = _coerce(name, cli_value)
        env_value = os.environ.get(env_var)
        if env_value:
            kwargs[name] = _coerce(name, env_value)

    return _validate(Config(**kwargs))

