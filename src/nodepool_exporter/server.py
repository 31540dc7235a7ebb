"""HTTP server management for the Nodepool exporter.

This module provides the ExporterServer class that binds the listening socket
and runs a uvicorn server on it in the foreground until the process is
terminated.
"""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from starlette.types import ASGIApp

from nodepool_exporter.logging import get_logger

logger = get_logger(__name__)


class ExporterServer:
    """Foreground server for the exporter's web interface.

    The socket is bound before uvicorn starts so that a bind failure surfaces
    as an ``OSError`` from :meth:`bind` or :meth:`serve` instead of being
    handled inside uvicorn.

    Example:
        from nodepool_exporter.web import create_app
        from nodepool_exporter.server import ExporterServer

        server = ExporterServer(host="0.0.0.0", port=9533)
        server.serve(create_app(registry))
    """

    def __init__(self, host: str, port: int) -> None:
        """Initialize the exporter server.

        Args:
            host: The host address to bind to (e.g., "0.0.0.0" or "::1").
            port: The port to listen on.
        """
        self._host = host
        self._port = port

    @property
    def host(self) -> str:
        """Get the host address."""
        return self._host

    @property
    def port(self) -> int:
        """Get the port number."""
        return self._port

    def bind(self) -> socket.socket:
        """Create a socket bound to the configured address.

        Returns:
            The bound socket.

        Raises:
            OSError: If the address cannot be bound.
        """
        family = socket.AF_INET6 if ":" in self._host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self._host, self._port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    def serve(self, app: ASGIApp) -> None:
        """Bind the listener and serve the application until terminated.

        Args:
            app: The ASGI application to serve.

        Raises:
            OSError: If the listener cannot be bound.
        """
        import uvicorn

        sock = self.bind()

        config = uvicorn.Config(
            app=app,
            log_config=None,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        logger.info("Listening on %s:%s", self._host, self._port)
        try:
            server.run(sockets=[sock])
        finally:
            sock.close()


__all__ = ["ExporterServer"]
