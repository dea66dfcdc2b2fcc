"""
HTTP layer for the telemetry server.

Provides:
- Probe routes (/liveness, /readiness, /metrics)
- Prometheus registry adapter
- uvicorn transport running the probe application in the background
"""

from service_telemetry.http.metrics import MetricsRegistry, PrometheusRegistry, render_metrics
from service_telemetry.http.probes import get_probe_routes, map_to_status_code
from service_telemetry.http.transport import (
    ListenHandle,
    Transport,
    UvicornListener,
    UvicornTransport,
    bind_socket,
)

__all__ = [
    "MetricsRegistry",
    "PrometheusRegistry",
    "render_metrics",
    "get_probe_routes",
    "map_to_status_code",
    "ListenHandle",
    "Transport",
    "UvicornListener",
    "UvicornTransport",
    "bind_socket",
]
