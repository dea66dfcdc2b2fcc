"""
uvicorn-backed listener for the probe application.

The listening socket is bound synchronously by the caller so bind errors
surface immediately; the uvicorn server itself runs on a background thread
with its own event loop.
"""

import asyncio
import socket
import threading
from typing import Callable, Optional, Protocol

import uvicorn
from starlette.types import ASGIApp

THREAD_NAME = "service-telemetry"


class ListenHandle(Protocol):
    """Handle on an active listener."""

    def close(self, on_closed: Optional[Callable[[], None]] = None) -> None: ...

    def wait_started(self, timeout: Optional[float] = None) -> bool: ...

    def wait_closed(self, timeout: Optional[float] = None) -> bool: ...


class Transport(Protocol):
    """Builds a listener serving `app` on host/port."""

    def __call__(
        self,
        app: ASGIApp,
        host: str,
        port: int,
        on_listening: Optional[Callable[[], None]] = None,
    ) -> ListenHandle: ...


class _NotifyingServer(uvicorn.Server):
    """
    uvicorn Server that reports when it starts accepting connections.

    Exit requests arriving before startup completes are held back until
    the listening callback has run.
    """

    def __init__(self, config: uvicorn.Config, on_listening: Optional[Callable[[], None]]):
        super().__init__(config)
        self._on_listening = on_listening
        self._exit_lock = threading.Lock()
        self._startup_done = False
        self._exit_requested = False
        self.startup_finished = threading.Event()

    async def startup(self, sockets: Optional[list] = None) -> None:
        try:
            await super().startup(sockets=sockets)
            if self.started and self._on_listening is not None:
                self._on_listening()
        finally:
            with self._exit_lock:
                self._startup_done = True
                exit_requested = self._exit_requested
            self.startup_finished.set()
            if exit_requested:
                # Applied once serve() is in its main loop so shutdown runs normally
                asyncio.get_running_loop().call_soon(self.request_exit)

    def request_exit(self) -> None:
        """Ask the server to exit, deferred until startup has finished."""
        with self._exit_lock:
            if not self._startup_done:
                self._exit_requested = True
                return
        self.should_exit = True


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind a TCP socket for the listener.

    Raises:
        OSError: If the address is unavailable (e.g. port already in use)
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


class UvicornListener:
    """Listener running a uvicorn server on a daemon thread."""

    def __init__(self, server: _NotifyingServer, sock: socket.socket):
        self.server = server
        self.sock = sock
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self._close_callbacks: list[Callable[[], None]] = []
        self.thread = threading.Thread(target=self._run, name=THREAD_NAME, daemon=True)

    def start(self) -> None:
        self.thread.start()

    def _run(self) -> None:
        try:
            asyncio.run(self.server.serve(sockets=[self.sock]))
        finally:
            self.sock.close()
            self.server.startup_finished.set()
            with self._lock:
                self._closed.set()
                callbacks = list(self._close_callbacks)
                self._close_callbacks.clear()
            for callback in callbacks:
                callback()

    def close(self, on_closed: Optional[Callable[[], None]] = None) -> None:
        """
        Ask the server to exit.

        Returns immediately. If the server is still starting, the exit is
        applied after the listening callback has run. `on_closed` runs on
        the listener thread once the server has finished shutting down (or
        right away if it already has).
        """
        with self._lock:
            already_closed = self._closed.is_set()
            if on_closed is not None and not already_closed:
                self._close_callbacks.append(on_closed)
        self.server.request_exit()
        if already_closed and on_closed is not None:
            on_closed()

    def wait_started(self, timeout: Optional[float] = None) -> bool:
        """Block until startup has finished or failed. Returns False on timeout."""
        return self.server.startup_finished.wait(timeout)

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Block until the server has shut down. Returns False on timeout."""
        return self._closed.wait(timeout)


class UvicornTransport:
    """Default transport: serves the app with uvicorn."""

    def __init__(self, log_level: str = "warning"):
        self.log_level = log_level

    def __call__(
        self,
        app: ASGIApp,
        host: str,
        port: int,
        on_listening: Optional[Callable[[], None]] = None,
    ) -> UvicornListener:
        sock = bind_socket(host, port)
        config = uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level=self.log_level,
            lifespan="off",
            server_header=False,
            access_log=False,
        )
        # uvicorn only installs signal handlers on the main thread, so the
        # host keeps ownership of SIGTERM/SIGINT.
        server = _NotifyingServer(config, on_listening)
        listener = UvicornListener(server, sock)
        listener.start()
        return listener
