"""Bootstrap and dependency wiring for the Nodepool exporter.

This module provides the startup and initialization logic, including:
- Configuration loading with CLI overrides
- Logging setup
- Collector construction
- Metrics registry creation and registration

The registry is created here, once per process, and passed explicitly to the
web application. Nothing is registered at import time.
"""

from __future__ import annotations

import argparse
import platform
from dataclasses import replace
from typing import Any

from prometheus_client import (
    CollectorRegistry,
    GCCollector,
    Info,
    PlatformCollector,
    ProcessCollector,
)

from nodepool_exporter import __version__
from nodepool_exporter.collector import NodepoolCollector, Target
from nodepool_exporter.config import Config, load_config, parse_listen_address
from nodepool_exporter.exceptions import ConfigurationError
from nodepool_exporter.logging import get_logger, setup_logging

logger = get_logger(__name__)

BUILD_INFO_METRIC = "nodepool_exporter_build"


class BootstrapContext:
    """Container for all bootstrapped dependencies.

    Holds everything the application runner needs to start serving.
    """

    def __init__(
        self,
        config: Config,
        collector: NodepoolCollector,
        registry: CollectorRegistry,
        listen_host: str,
        listen_port: int,
    ) -> None:
        """Initialize the bootstrap context.

        Args:
            config: Exporter configuration.
            collector: The registered nodepool collector.
            registry: Registry serialized by the metrics endpoint.
            listen_host: Host the HTTP server binds to.
            listen_port: Port the HTTP server binds to.
        """
        self.config = config
        self.collector = collector
        self.registry = registry
        self.listen_host = listen_host
        self.listen_port = listen_port


def apply_cli_overrides(config: Config, parsed: argparse.Namespace) -> Config:
    """Apply CLI argument overrides to the configuration.

    Args:
        config: Base configuration loaded from environment.
        parsed: Parsed command-line arguments.

    Returns:
        New Config instance with CLI overrides applied.
    """
    web_overrides: dict[str, Any] = {}
    nodepool_overrides: dict[str, Any] = {}
    logging_overrides: dict[str, Any] = {}

    if parsed.listen_address:
        web_overrides["listen_address"] = parsed.listen_address
    if parsed.telemetry_path:
        path = parsed.telemetry_path
        web_overrides["telemetry_path"] = path if path.startswith("/") else f"/{path}"
    if parsed.nodepool_host:
        nodepool_overrides["host"] = parsed.nodepool_host
    if parsed.nodepool_port:
        nodepool_overrides["port"] = parsed.nodepool_port
    if parsed.log_level:
        logging_overrides["level"] = parsed.log_level
    if parsed.log_format:
        logging_overrides["json"] = parsed.log_format == "json"

    overrides: dict[str, Any] = {}
    if web_overrides:
        overrides["web"] = replace(config.web, **web_overrides)
    if nodepool_overrides:
        overrides["nodepool"] = replace(config.nodepool, **nodepool_overrides)
    if logging_overrides:
        overrides["logging_config"] = replace(config.logging_config, **logging_overrides)

    if overrides:
        return replace(config, **overrides)
    return config


def build_registry(collector: NodepoolCollector) -> CollectorRegistry:
    """Create the process-wide metrics registry.

    Registers the nodepool collector, the exporter's build information and
    the runtime collectors shipped with prometheus_client.

    Args:
        collector: The nodepool collector to register.

    Returns:
        A populated CollectorRegistry.
    """
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)

    build_info = Info(
        BUILD_INFO_METRIC,
        "A metric with a constant '1' value labeled by version and pythonversion "
        "from which nodepool_exporter was built.",
        registry=registry,
    )
    build_info.info({"version": __version__, "pythonversion": platform.python_version()})

    registry.register(collector)
    return registry


def bootstrap(parsed: argparse.Namespace) -> BootstrapContext | None:
    """Load configuration and wire the exporter's dependencies.

    Args:
        parsed: Parsed command-line arguments.

    Returns:
        BootstrapContext on success, or None if the configuration is unusable
        (the error is logged).
    """
    config = apply_cli_overrides(load_config(parsed.env_file), parsed)

    setup_logging(config.logging_config.level, json_format=config.logging_config.json)

    try:
        listen_host, listen_port = parse_listen_address(config.web.listen_address)
    except ConfigurationError as e:
        logger.critical("%s", e)
        return None

    target = Target(host=config.nodepool.host, port=config.nodepool.port)
    collector = NodepoolCollector(target)
    registry = build_registry(collector)

    return BootstrapContext(
        config=config,
        collector=collector,
        registry=registry,
        listen_host=listen_host,
        listen_port=listen_port,
    )


__all__ = [
    "BootstrapContext",
    "apply_cli_overrides",
    "bootstrap",
    "build_registry",
]
