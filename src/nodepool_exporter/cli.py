"""Command-line interface argument parsing for the Nodepool exporter.

Flags mirror the environment settings in :mod:`nodepool_exporter.config` and
take precedence over them:
- Web listen address and telemetry path
- Nodepool host and port
- Log level and log format
- Environment file specification
- Version printing
"""

from __future__ import annotations

import argparse
import platform
from pathlib import Path

from nodepool_exporter import __version__


def version_string() -> str:
    """Return the version banner printed by ``--version``."""
    return f"nodepool_exporter, version {__version__} (python {platform.python_version()})"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Optional list of arguments to parse. If None, uses sys.argv.

    Returns:
        Parsed arguments namespace with the following attributes:
        - listen_address: Address to expose the web interface on
        - telemetry_path: Path under which metrics are exposed
        - nodepool_host: Nodepool hostname
        - nodepool_port: Nodepool port
        - log_level: Logging level
        - log_format: Log output format (text or json)
        - env_file: Path to .env file

        Unset options are None so environment values are kept.
    """
    parser = argparse.ArgumentParser(
        prog="nodepool_exporter",
        description="Nodepool -> Prometheus exporter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=None,
        help="The address on which to expose the web interface and generated "
        "Prometheus metrics (default: :9533)",
    )

    parser.add_argument(
        "--web.telemetry-path",
        dest="telemetry_path",
        default=None,
        help="Path under which to expose metrics (default: /metrics)",
    )

    parser.add_argument(
        "--nodepool.listen-host",
        dest="nodepool_host",
        default=None,
        help="The nodepool hostname (default: localhost)",
    )

    parser.add_argument(
        "--nodepool.listen-port",
        dest="nodepool_port",
        default=None,
        help="The nodepool port (default: 8005)",
    )

    parser.add_argument(
        "--log.level",
        dest="log_level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Log level (overrides NODEPOOL_EXPORTER_LOG_LEVEL)",
    )

    parser.add_argument(
        "--log.format",
        dest="log_format",
        choices=["text", "json"],
        default=None,
        help="Log output format (overrides NODEPOOL_EXPORTER_LOG_JSON)",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: ./.env)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=version_string(),
    )

    return parser.parse_args(args)


__all__ = ["parse_args", "version_string"]
