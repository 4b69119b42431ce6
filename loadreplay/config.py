"""Configuration module: frozen dataclass loaded from YAML, env vars and CLI args."""

import logging
import os
import sys
from argparse import ArgumentParser
from dataclasses import dataclass, fields

import yaml

logger = logging.getLogger(__name__)

MIN_POOL_SIZE = 100


class ConfigError(ValueError):
    """Raised when configuration values are missing or out of range."""


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def parse_filters(raw) -> tuple[str, ...]:
    """Split a comma-separated filter string, dropping blank entries."""
    if raw is None:
        return ()
    if isinstance(raw, (list, tuple)):
        items = raw
    else:
        items = str(raw).split(",")
    return tuple(s.strip() for s in items if str(s).strip())


@dataclass(frozen=True)
class Config:
    log_file: str = ""
    concurrency: int = 2
    filters: tuple[str, ...] = ()
    report_interval: int = 1
    base_url: str = ""
    keep_cookies: bool = False
    verbose: bool = False
    suppress_errors: bool = False
    repeat: bool = False
    request_timeout: float = 10.0

    @property
    def pool_size(self) -> int:
        """Connection pool size per worker session."""
        return max(MIN_POOL_SIZE, self.concurrency)


_CONVERTERS = {
    "log_file": str,
    "concurrency": int,
    "filters": parse_filters,
    "report_interval": int,
    "base_url": str,
    "keep_cookies": _parse_bool,
    "verbose": _parse_bool,
    "suppress_errors": _parse_bool,
    "repeat": _parse_bool,
    "request_timeout": float,
}

_ENV_VARS = {
    "log_file": "REPLAY_LOG_FILE",
    "concurrency": "REPLAY_CONCURRENCY",
    "filters": "REPLAY_FILTERS",
    "report_interval": "REPLAY_INTERVAL",
    "base_url": "REPLAY_BASE_URL",
    "keep_cookies": "REPLAY_KEEP_COOKIES",
    "verbose": "REPLAY_VERBOSE",
    "suppress_errors": "REPLAY_SUPPRESS_ERRORS",
    "repeat": "REPLAY_REPEAT",
    "request_timeout": "REPLAY_TIMEOUT",
}


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser.

    Every option defaults to None so that unset flags do not mask values
    coming from the environment or a YAML file.
    """
    parser = ArgumentParser(
        prog="loadreplay",
        description="Replay GET requests from an access log against a base URL.",
    )
    parser.add_argument("-l", "--log-file", help="Access log file to replay")
    parser.add_argument(
        "-c", "--concurrency", type=int, help="Number of concurrent workers (default: 2)"
    )
    parser.add_argument(
        "-f", "--filters", help="Comma-separated substrings excluded from replay"
    )
    parser.add_argument(
        "-r", "--report-interval", type=int, help="Seconds between throughput reports (default: 1)"
    )
    parser.add_argument("-b", "--base-url", help="Prefix put in front of every path")
    parser.add_argument(
        "-k", "--keep-cookies", action="store_true", default=None,
        help="Keep cookies across requests of the same worker",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=None, help="Log every issued URL"
    )
    parser.add_argument(
        "-s", "--suppress-errors", action="store_true", default=None,
        help="Do not log per-request errors",
    )
    parser.add_argument(
        "-rp", "--repeat", action="store_true", default=None,
        help="Start over after reaching the end of the log file",
    )
    parser.add_argument(
        "--timeout", dest="request_timeout", type=float, help="Per-request timeout in seconds"
    )
    parser.add_argument("--config", help="Optional YAML file with the same settings")
    return parser


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def _convert(key: str, value):
    try:
        return _CONVERTERS[key](value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e


def load_config(argv: list[str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars <- CLI args."""
    if argv is None:
        argv = sys.argv[1:]

    args = build_parser().parse_args(argv)
    known = {f.name for f in fields(Config)}
    kwargs: dict = {}

    for key, value in load_yaml_config(args.config).items():
        key = key.replace("-", "_")
        if key not in known:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        kwargs[key] = _convert(key, value)

    for key, env_name in _ENV_VARS.items():
        if env_name in os.environ:
            kwargs[key] = _convert(key, os.environ[env_name])

    for key in known:
        value = getattr(args, key, None)
        if value is not None:
            kwargs[key] = _convert(key, value)

    config = Config(**kwargs)
    validate(config)
    return config


def validate(config: Config):
    """Raise ConfigError if the configuration cannot drive a replay."""
    if not config.log_file:
        raise ConfigError("An access log file is required (--log-file)")
    if config.concurrency < 1:
        raise ConfigError(f"Concurrency must be at least 1, got {config.concurrency}")
    if config.report_interval < 1:
        raise ConfigError(
            f"Report interval must be at least 1 second, got {config.report_interval}"
        )
    if config.request_timeout <= 0:
        raise ConfigError(f"Request timeout must be positive, got {config.request_timeout}")
