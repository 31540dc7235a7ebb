"""Core application runner for the Nodepool exporter.

This module coordinates:
- Argument parsing
- Bootstrap of configuration, collector and registry
- Startup logging
- Serving the web interface until the process is terminated

A listen address that cannot be bound is fatal: the error is logged and
``main`` returns exit code 1.
"""

from __future__ import annotations

import platform

from nodepool_exporter import __version__
from nodepool_exporter.bootstrap import BootstrapContext, bootstrap
from nodepool_exporter.cli import parse_args
from nodepool_exporter.logging import get_logger
from nodepool_exporter.server import ExporterServer
from nodepool_exporter.web import create_app

logger = get_logger(__name__)


def log_startup(context: BootstrapContext) -> None:
    """Log version, build context and the addresses in use."""
    config = context.config
    logger.info("Starting Nodepool -> Prometheus Exporter (version=%s)", __version__)
    logger.info(
        "Build context (python=%s, implementation=%s, platform=%s)",
        platform.python_version(),
        platform.python_implementation(),
        platform.platform(),
    )
    logger.info("Accepting nodepool address: %s", context.collector.target)
    logger.info(
        "Accepting Prometheus Requests on %s",
        config.web.listen_address,
        extra={"listen_address": config.web.listen_address},
    )


def run_application(context: BootstrapContext) -> int:
    """Serve the exporter until the server loop ends.

    Args:
        context: Bootstrap context with all dependencies.

    Returns:
        Exit code: 0 when the server stopped, 1 if the listener could not bind.
    """
    log_startup(context)

    app = create_app(context.registry, context.config.web.telemetry_path)
    server = ExporterServer(host=context.listen_host, port=context.listen_port)

    try:
        server.serve(app)
    except OSError as e:
        logger.critical(
            "Cannot listen on %s: %s",
            context.config.web.listen_address,
            e,
            extra={"listen_address": context.config.web.listen_address},
        )
        return 1
    finally:
        context.collector.close()

    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the exporter.

    Args:
        args: Optional list of command-line arguments.

    Returns:
        Exit code for the process.
    """
    parsed = parse_args(args)

    context = bootstrap(parsed)
    if context is None:
        # Bootstrap failed (logged internally)
        return 1

    return run_application(context)


__all__ = [
    "log_startup",
    "main",
    "run_application",
]
