"""
Probe server.

Owns the application state and the Starlette application serving the
probes, and drives the start/stop lifecycle of the listener.
"""

import threading
from typing import Optional

from starlette.applications import Starlette

from service_telemetry.errors import LifecycleError
from service_telemetry.http.metrics import MetricsRegistry, PrometheusRegistry
from service_telemetry.http.probes import get_probe_routes
from service_telemetry.http.transport import ListenHandle, Transport, UvicornTransport
from service_telemetry.state import ApplicationState, LifecyclePhase
from service_telemetry.utils.logging import InfoLogger, get_default_logger

STARTUP_WAIT_SECONDS = 10.0


class ProbeServer:
    """
    Telemetry probes for a host application.

    Probes are not reachable until `start` is called. A ProbeServer goes
    through its lifecycle once: it can be started once and stopped once.

    Example:
        telemetry = ProbeServer().start(9464)
        ...  # application startup
        telemetry.signal_ready()
        ...
        telemetry.signal_stopped()
        telemetry.stop()
    """

    def __init__(
        self,
        logger: Optional[InfoLogger] = None,
        registry: Optional[MetricsRegistry] = None,
        host: str = "0.0.0.0",
        transport: Optional[Transport] = None,
    ):
        """
        Initialize the probe server.

        Args:
            logger: Object with an `info(message)` method. Defaults to a
                    stdout logger.
            registry: Metrics registry for /metrics. Defaults to the
                      prometheus_client global registry.
            host: Interface to bind when started
            transport: Listener factory. Defaults to uvicorn.
        """
        self.logger = logger if logger is not None else get_default_logger()
        self.registry = registry if registry is not None else PrometheusRegistry()
        self.host = host
        self.transport = transport if transport is not None else UvicornTransport()
        self.state = ApplicationState()
        self._listener: Optional[ListenHandle] = None
        self._lifecycle_lock = threading.Lock()
        self._app = Starlette(routes=get_probe_routes(self.state, self.registry))

    def signal_ready(self) -> None:
        """
        Mark the application as available for traffic.

        The readiness probe returns 200 until `signal_not_ready` or
        `signal_stopped` is called. Call this as the last step of startup.
        """
        self.state.mark_ready()

    def signal_not_ready(self) -> None:
        """
        Mark the application as unavailable for traffic.

        The readiness probe returns 500; the pod is not restarted.
        Liveness is unaffected.
        """
        self.state.mark_not_ready()

    def signal_stopped(self) -> None:
        """
        Mark the application as no longer useful.

        Both probes return 500, which makes the orchestrator terminate the
        pod. Metrics stay available. Call this just before `stop`.
        """
        self.state.mark_stopped()

    def get_app(self) -> Starlette:
        """Return the Starlette application serving the probes."""
        return self._app

    @property
    def phase(self) -> LifecyclePhase:
        """Current lifecycle phase of the listener."""
        return self.state.phase

    def start(self, port: int) -> "ProbeServer":
        """
        Make the probes available on a network port.

        Args:
            port: Port the probes should listen on

        Returns:
            This server, for chaining

        Raises:
            LifecycleError: If the server was already started
            ValueError: If port is not a positive integer
            OSError: If the port cannot be bound
        """
        if isinstance(port, bool) or not isinstance(port, int) or port <= 0:
            raise ValueError(f"Invalid port: {port!r}")

        with self._lifecycle_lock:
            if self._listener is not None:
                raise LifecycleError("Service telemetry already started")

            self.logger.info("Service telemetry starting...")
            self._listener = self.transport(
                self._app,
                self.host,
                port,
                lambda: self.logger.info(f"Service telemetry is up on {port}"),
            )
            self.state.advance(LifecyclePhase.UNSTARTED, LifecyclePhase.STARTED)
        return self

    def stop(self) -> None:
        """
        Withdraw the probes.

        Waits for a listener that is still starting to come up, then asks
        it to close and returns; the stopped message is logged when the
        close completes. Call this as the last step of shutdown.

        Raises:
            LifecycleError: If the server is not running
        """
        with self._lifecycle_lock:
            if not self.state.advance(LifecyclePhase.STARTED, LifecyclePhase.STOPPED):
                raise LifecycleError("Service telemetry not started")

            self._listener.wait_started(STARTUP_WAIT_SECONDS)
            self.logger.info("Service telemetry stopping...")
            self._listener.close(lambda: self.logger.info("Service telemetry is stopped"))

    def wait_stopped(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the listener has closed.

        Returns:
            True once closed, False on timeout

        Raises:
            LifecycleError: If the server was never started
        """
        if self._listener is None:
            raise LifecycleError("Service telemetry not started")
        return self._listener.wait_closed(timeout)
