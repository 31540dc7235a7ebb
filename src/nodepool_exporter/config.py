"""Configuration loading from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from nodepool_exporter.exceptions import ConfigurationError

# Valid log levels
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Port validation bounds
MIN_PORT = 1
MAX_PORT = 65535

DEFAULT_LISTEN_ADDRESS = ":9533"
DEFAULT_TELEMETRY_PATH = "/metrics"
DEFAULT_NODEPOOL_HOST = "localhost"
DEFAULT_NODEPOOL_PORT = "8005"


@dataclass(frozen=True)
class WebConfig:
    """Where the exporter serves its own HTTP endpoints.

    Attributes:
        listen_address: Address in ``[host]:port`` form; an empty host binds
            all interfaces.
        telemetry_path: Path under which metrics are exposed.
    """

    listen_address: str = DEFAULT_LISTEN_ADDRESS
    telemetry_path: str = DEFAULT_TELEMETRY_PATH


@dataclass(frozen=True)
class NodepoolConfig:
    """The nodepool instance being monitored."""

    host: str = DEFAULT_NODEPOOL_HOST
    port: str = DEFAULT_NODEPOOL_PORT


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration.

    Attributes:
        level: Log level name.
        json: Whether to emit one JSON object per log line.
    """

    level: str = "INFO"
    json: bool = False


@dataclass(frozen=True)
class Config:
    """Exporter configuration loaded from environment.

    This dataclass is frozen (immutable) to prevent accidental modification
    after creation. CLI overrides produce a new instance.
    """

    web: WebConfig = field(default_factory=WebConfig)
    nodepool: NodepoolConfig = field(default_factory=NodepoolConfig)
    logging_config: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    """Parse a string as a boolean.

    Args:
        value: The string value to parse.

    Returns:
        True if value is "true", "1", or "yes" (case-insensitive), False otherwise.
    """
    return value.lower() in ("true", "1", "yes")


def _validate_log_level(value: str, default: str = "INFO") -> str:
    """Validate and normalize a log level string.

    Args:
        value: The log level string to validate.
        default: The default value to use if invalid.

    Returns:
        The validated log level (uppercase), or the default if invalid.

    Logs a warning if the value is invalid.
    """
    normalized = value.upper()
    if normalized not in VALID_LOG_LEVELS:
        logging.warning(
            "Invalid NODEPOOL_EXPORTER_LOG_LEVEL: '%s' is not valid, using default '%s'. "
            "Valid values: %s",
            value,
            default,
            ", ".join(sorted(VALID_LOG_LEVELS)),
        )
        return default
    return normalized


def _parse_port(value: str, name: str, default: str) -> str:
    """Validate a TCP port given as a string.

    The port stays a string because it is interpolated verbatim into the
    scrape URI.

    Args:
        value: The string value to validate.
        name: The name of the setting (for error messages).
        default: The default value to use if invalid.

    Returns:
        The normalized port string, or the default if invalid.

    Logs a warning if the value is invalid or out of range.
    """
    try:
        parsed = int(value)
    except ValueError:
        logging.warning(
            "Invalid %s: '%s' is not a valid integer, using default %s",
            name,
            value,
            default,
        )
        return default
    if parsed < MIN_PORT or parsed > MAX_PORT:
        logging.warning(
            "Invalid %s: %d is not a valid port (must be %d-%d), using default %s",
            name,
            parsed,
            MIN_PORT,
            MAX_PORT,
            default,
        )
        return default
    return str(parsed)


def _validate_host(value: str, name: str, default: str) -> str:
    """Validate a hostname, falling back to the default when empty."""
    value = value.strip()
    if not value:
        logging.warning("Invalid %s: empty host, using default '%s'", name, default)
        return default
    return value


def _normalize_telemetry_path(value: str, default: str = DEFAULT_TELEMETRY_PATH) -> str:
    """Ensure the telemetry path is absolute.

    Args:
        value: The configured path.
        default: The default value to use if the path is empty.

    Returns:
        The path with a leading slash, or the default if empty.
    """
    value = value.strip()
    if not value:
        logging.warning(
            "Invalid NODEPOOL_EXPORTER_TELEMETRY_PATH: empty path, using default '%s'", default
        )
        return default
    if not value.startswith("/"):
        logging.warning(
            "NODEPOOL_EXPORTER_TELEMETRY_PATH '%s' has no leading '/', using '/%s'",
            value,
            value,
        )
        return f"/{value}"
    return value


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split a ``[host]:port`` listen address into bind host and port.

    An empty host (``":9533"``) binds all IPv4 interfaces. IPv6 hosts must be
    bracketed (``"[::1]:9533"``).

    Args:
        address: The listen address.

    Returns:
        Tuple of (host, port).

    Raises:
        ConfigurationError: If the address has no port or the port is invalid.
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ConfigurationError(f"Invalid listen address '{address}': missing port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigurationError(
            f"Invalid listen address '{address}': IPv6 hosts must be enclosed in brackets"
        )

    try:
        port = int(port_str)
    except ValueError:
        raise ConfigurationError(
            f"Invalid listen address '{address}': '{port_str}' is not a valid port"
        ) from None
    # Port 0 asks the OS for an ephemeral port
    if port < 0 or port > MAX_PORT:
        raise ConfigurationError(
            f"Invalid listen address '{address}': port {port} is out of range"
        )

    return host or "0.0.0.0", port


def load_config(env_file: Path | None = None) -> Config:
    """Load configuration from environment variables.

    Args:
        env_file: Optional path to .env file. If not provided,
                  looks for .env in current directory.

    Returns:
        Config object with loaded values.

    Values are validated and defaults are used for invalid inputs. The listen
    address is validated at bootstrap, where an invalid value is fatal.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    web = WebConfig(
        listen_address=os.getenv("NODEPOOL_EXPORTER_LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS),
        telemetry_path=_normalize_telemetry_path(
            os.getenv("NODEPOOL_EXPORTER_TELEMETRY_PATH", DEFAULT_TELEMETRY_PATH)
        ),
    )

    nodepool = NodepoolConfig(
        host=_validate_host(
            os.getenv("NODEPOOL_HOST", DEFAULT_NODEPOOL_HOST),
            "NODEPOOL_HOST",
            DEFAULT_NODEPOOL_HOST,
        ),
        port=_parse_port(
            os.getenv("NODEPOOL_PORT", DEFAULT_NODEPOOL_PORT),
            "NODEPOOL_PORT",
            DEFAULT_NODEPOOL_PORT,
        ),
    )

    logging_config = LoggingConfig(
        level=_validate_log_level(os.getenv("NODEPOOL_EXPORTER_LOG_LEVEL", "INFO")),
        json=_parse_bool(os.getenv("NODEPOOL_EXPORTER_LOG_JSON", "")),
    )

    return Config(web=web, nodepool=nodepool, logging_config=logging_config)


__all__ = [
    "Config",
    "LoggingConfig",
    "NodepoolConfig",
    "WebConfig",
    "load_config",
    "parse_listen_address",
]
