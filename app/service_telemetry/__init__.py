"""
Service Telemetry.

Sidecar probe endpoint that lets a host application report liveness and
readiness to an orchestrator and expose Prometheus metrics to a scraper.
"""

__version__ = "0.1.0"

from service_telemetry.errors import LifecycleError, TelemetryError
from service_telemetry.server import ProbeServer
from service_telemetry.state import ApplicationState, LifecyclePhase

__all__ = [
    "__version__",
    "ApplicationState",
    "LifecycleError",
    "LifecyclePhase",
    "ProbeServer",
    "TelemetryError",
]
