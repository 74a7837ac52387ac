"""
HTTP pull endpoint.

Serves a registry's gauges in the Prometheus text format using
prometheus_client's threaded WSGI server. The server runs on its own
thread with an explicit start/stop lifecycle; stop() joins the thread.
"""

import threading
from wsgiref.simple_server import WSGIServer

from prometheus_client import CollectorRegistry, start_http_server

from .logging import get_logger

logger = get_logger("exposition")


class TransportError(Exception):
    """The exposition endpoint could not be started."""

    pass


class ExpositionServer:
    """
    Start/stop wrapper around prometheus_client.start_http_server.

    Usage:
        server = ExpositionServer(registry.prometheus, port=8000)
        server.start()
        ...
        server.stop()
    """

    def __init__(self, registry: CollectorRegistry, port: int = 8000, address: str = "0.0.0.0"):
        self.registry = registry
        self.address = address
        self._requested_port = port
        self._server: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int:
        """Bound port once started (resolves port 0), else the requested port."""
        if self._server is not None:
            return self._server.server_address[1]
        return self._requested_port

    @property
    def url(self) -> str:
        host = "127.0.0.1" if self.address in ("0.0.0.0", "") else self.address
        return f"http://{host}:{self.port}/metrics"

    def start(self) -> None:
        """
        Bind and start serving.

        Raises:
            TransportError: If the address cannot be bound
            RuntimeError: If already running
        """
        if self._server is not None:
            raise RuntimeError("Exposition server already running")

        try:
            server, thread = start_http_server(
                self._requested_port,
                addr=self.address,
                registry=self.registry,
            )
        except OSError as e:
            raise TransportError(
                f"cannot listen on {self.address}:{self._requested_port}: {e.strerror or e}"
            ) from e

        self._server = server
        self._thread = thread
        logger.info(f"Serving metrics on {self.address}:{self.port}")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop serving, close the socket and join the thread. Idempotent."""
        server, thread = self._server, self._thread
        if server is None:
            return

        self._server = None
        self._thread = None

        server.shutdown()
        server.server_close()
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Exposition thread did not exit in time")

        logger.info("Exposition server stopped")
