"""
Integration test fixtures.

Provides a ProbeServer listening on a real port through uvicorn.
"""

import socket
import threading
import time
from typing import Generator

import httpx
import pytest
from prometheus_client import CollectorRegistry

from service_telemetry.http.metrics import PrometheusRegistry
from service_telemetry.server import ProbeServer

TEST_HOST = "127.0.0.1"


class RecordingLogger:
    """Logger collecting messages, with a hook to wait for one."""

    def __init__(self):
        self.messages: list[str] = []
        self._changed = threading.Condition()

    def info(self, message: str) -> None:
        with self._changed:
            self.messages.append(message)
            self._changed.notify_all()

    def wait_for(self, message: str, timeout: float = 10.0) -> bool:
        deadline = time.monotonic() + timeout
        with self._changed:
            while message not in self.messages:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._changed.wait(remaining)
            return True


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((TEST_HOST, 0))
        return sock.getsockname()[1]


@pytest.fixture
def unused_port() -> int:
    return free_port()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def running_server(
    recording_logger: RecordingLogger, collector_registry: CollectorRegistry
) -> Generator[tuple[ProbeServer, int], None, None]:
    """
    Start a ProbeServer on a free port and wait until it is listening.

    Yields:
        (server, port)
    """
    port = free_port()
    server = ProbeServer(
        logger=recording_logger,
        registry=PrometheusRegistry(collector_registry),
        host=TEST_HOST,
    ).start(port)

    if not recording_logger.wait_for(f"Service telemetry is up on {port}"):
        raise RuntimeError(f"Server failed to start on port {port}")

    yield server, port

    if server.phase.value == "started":
        server.stop()
    server.wait_stopped(timeout=10)


@pytest.fixture
def http_client(running_server) -> Generator[httpx.Client, None, None]:
    _, port = running_server
    with httpx.Client(base_url=f"http://{TEST_HOST}:{port}", timeout=5.0) as client:
        yield client
