"""
Pytest configuration and shared fixtures.
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Optional
from unittest.mock import Mock

import pytest
from prometheus_client import CollectorRegistry, Counter
from starlette.testclient import TestClient


# Add app directory to path
APP_DIR = Path(__file__).parent.parent / "app"
sys.path.insert(0, str(APP_DIR))

from service_telemetry.http.metrics import PrometheusRegistry  # noqa: E402
from service_telemetry.server import ProbeServer  # noqa: E402
from service_telemetry.utils import logging as logging_utils  # noqa: E402


class FakeListener:
    """Listener that closes immediately."""

    def __init__(self):
        self.close_calls = 0
        self.closed = False

    def close(self, on_closed: Optional[Callable[[], None]] = None) -> None:
        self.close_calls += 1
        self.closed = True
        if on_closed is not None:
            on_closed()

    def wait_started(self, timeout: Optional[float] = None) -> bool:
        return True

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        return self.closed


class FakeTransport:
    """Transport that records binds and reports listening right away."""

    def __init__(self, notify: bool = True):
        self.notify = notify
        self.calls: list[tuple[str, int]] = []
        self.listener = FakeListener()

    def __call__(self, app, host: str, port: int, on_listening=None) -> FakeListener:
        self.calls.append((host, port))
        if self.notify and on_listening is not None:
            on_listening()
        return self.listener


class FailingRegistry:
    """Registry whose render always fails."""

    content_type = "text/plain; version=0.0.4; charset=utf-8"

    def metrics(self) -> str:
        raise ValueError("Duplicated timeseries in CollectorRegistry")


@pytest.fixture
def mock_logger() -> Mock:
    return Mock()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def failing_registry() -> FailingRegistry:
    return FailingRegistry()


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    """Isolated prometheus registry with one counter."""
    registry = CollectorRegistry()
    requests_total = Counter(
        "app_requests_total", "Total requests handled", registry=registry
    )
    requests_total.inc(3)
    return registry


@pytest.fixture
def probe_server(mock_logger, fake_transport, collector_registry) -> ProbeServer:
    return ProbeServer(
        logger=mock_logger,
        registry=PrometheusRegistry(collector_registry),
        transport=fake_transport,
    )


@pytest.fixture
def client(probe_server: ProbeServer) -> TestClient:
    return TestClient(probe_server.get_app())


def _is_pytest_handler(handler: logging.Handler) -> bool:
    return type(handler).__module__.startswith("_pytest")


@pytest.fixture
def isolated_logging(monkeypatch):
    """
    Run with an empty package logger and restore logging state afterwards.

    pytest's own capture handlers on the root logger are left alone.

    Yields:
        (root logger, package logger)
    """
    root = logging.getLogger()
    package = logging.getLogger(logging_utils.DEFAULT_LOGGER_NAME)
    root_handlers = [h for h in root.handlers if not _is_pytest_handler(h)]
    root_level = root.level
    package_handlers = package.handlers[:]
    package_level = package.level
    package_propagate = package.propagate

    for handler in package_handlers:
        package.removeHandler(handler)
    monkeypatch.setattr(logging_utils, "_default_handler", None)

    yield root, package

    for handler in root.handlers[:]:
        if not _is_pytest_handler(handler) and handler not in root_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in root_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(root_level)

    for handler in package.handlers[:]:
        package.removeHandler(handler)
        if handler not in package_handlers:
            handler.close()
    for handler in package_handlers:
        package.addHandler(handler)
    package.setLevel(package_level)
    package.propagate = package_propagate
