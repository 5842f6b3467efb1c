"""
Configuration dataclasses for the RDAP checker.

This module defines the configuration structures used throughout the system:
per-check options, resolver endpoints, and logging. Configuration can be
built from defaults, from environment variables (optionally via a .env file),
or from a JSON file.
"""

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__


DEFAULT_AGGREGATOR_URL = "https://rdap.org"
DEFAULT_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"
DEFAULT_USER_AGENT = f"rdap-checker/{__version__}"

ENV_PREFIX = "RDAP_CHECK_"


@dataclass
class CheckOptions:
    """Per-check options for a single domain resolution."""

    timeout_ms: int = 5000
    fallback: bool = True


@dataclass
class ResolverConfig:
    """Endpoints and limits for the RDAP resolver and bootstrap directory."""

    aggregator_url: str = DEFAULT_AGGREGATOR_URL
    bootstrap_url: str = DEFAULT_BOOTSTRAP_URL
    bootstrap_ttl_seconds: float = 3600.0
    bootstrap_timeout_seconds: float = 8.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class CheckerConfig:
    """Main configuration combining all sub-configurations."""

    options: CheckOptions = field(default_factory=CheckOptions)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    concurrency: Optional[int] = None


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _parse_bool(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off")


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return _parse_bool(value)


def _bool_value(value) -> bool:
    # JSON booleans pass through; strings follow the environment rules
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _parse_bool(value)
    raise TypeError(f"expected a boolean, got {value!r}")


def _concurrency_value(value) -> Optional[int]:
    if value is None:
        return None
    concurrency = int(value)
    return concurrency if concurrency > 0 else None


def load_config_from_env(env_file: Optional[Path] = None) -> CheckerConfig:
    """
    Build configuration from environment variables.

    A .env file is loaded first (without overriding variables that are
    already set). Malformed numeric values fall back to their defaults.

    Args:
        env_file: Optional explicit path to a .env file

    Returns:
        CheckerConfig populated from the environment
    """
    load_dotenv(dotenv_path=env_file)

    defaults = CheckerConfig()
    concurrency = _int_env(f"{ENV_PREFIX}CONCURRENCY", 0)

    return CheckerConfig(
        options=CheckOptions(
            timeout_ms=_int_env(f"{ENV_PREFIX}TIMEOUT_MS", defaults.options.timeout_ms),
            fallback=_bool_env(f"{ENV_PREFIX}FALLBACK", defaults.options.fallback),
        ),
        resolver=ResolverConfig(
            aggregator_url=os.getenv(
                f"{ENV_PREFIX}AGGREGATOR_URL", defaults.resolver.aggregator_url
            ),
            bootstrap_url=os.getenv(
                f"{ENV_PREFIX}BOOTSTRAP_URL", defaults.resolver.bootstrap_url
            ),
            bootstrap_ttl_seconds=_float_env(
                f"{ENV_PREFIX}BOOTSTRAP_TTL", defaults.resolver.bootstrap_ttl_seconds
            ),
        ),
        logging=LoggingConfig(
            level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.logging.level).lower(),
            output_format=os.getenv(
                f"{ENV_PREFIX}LOG_FORMAT", defaults.logging.output_format
            ).lower(),
        ),
        concurrency=concurrency if concurrency > 0 else None,
    )


def load_config_from_file(
    config_path: Path,
    base: Optional[CheckerConfig] = None,
) -> Optional[CheckerConfig]:
    """
    Load configuration from a JSON file.

    Missing keys keep the values of ``base`` (or the defaults). Numbers
    given as strings are converted; a non-positive concurrency means
    "no explicit bound".

    Args:
        config_path: Path to the configuration file
        base: Configuration to layer the file on top of

    Returns:
        CheckerConfig if successful, None otherwise
    """
    base = base or CheckerConfig()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise TypeError("top-level JSON value must be an object")

        options_data = data.get("options", {})
        resolver_data = data.get("resolver", {})
        logging_data = data.get("logging", {})

        return CheckerConfig(
            options=CheckOptions(
                timeout_ms=int(options_data.get("timeout_ms", base.options.timeout_ms)),
                fallback=_bool_value(options_data.get("fallback", base.options.fallback)),
            ),
            resolver=ResolverConfig(
                aggregator_url=resolver_data.get(
                    "aggregator_url", base.resolver.aggregator_url
                ),
                bootstrap_url=resolver_data.get(
                    "bootstrap_url", base.resolver.bootstrap_url
                ),
                bootstrap_ttl_seconds=float(resolver_data.get(
                    "bootstrap_ttl_seconds", base.resolver.bootstrap_ttl_seconds
                )),
                bootstrap_timeout_seconds=float(resolver_data.get(
                    "bootstrap_timeout_seconds", base.resolver.bootstrap_timeout_seconds
                )),
                user_agent=resolver_data.get("user_agent", base.resolver.user_agent),
            ),
            logging=LoggingConfig(
                level=logging_data.get("level", base.logging.level),
                output_format=logging_data.get(
                    "output_format", base.logging.output_format
                ),
            ),
            concurrency=_concurrency_value(data.get("concurrency", base.concurrency)),
        )

    except (json.JSONDecodeError, TypeError, ValueError, AttributeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None
