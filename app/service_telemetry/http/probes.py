"""
Probe endpoints for Kubernetes and Prometheus.

Provides:
- /liveness: 200 while the application is live, 500 otherwise
- /readiness: 200 while the application accepts traffic, 500 otherwise
- /metrics: metrics rendered by the registry, 500 if rendering fails

Probe responses carry no body; the status code is the signal.
"""

from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from service_telemetry.http.metrics import MetricsRegistry, render_metrics
from service_telemetry.state import ApplicationState


def map_to_status_code(state: bool) -> int:
    return 200 if state else 500


def get_probe_routes(state: ApplicationState, registry: MetricsRegistry) -> list[Route]:
    """
    Build the probe routes for the given state and registry.

    Args:
        state: Application state read by the liveness/readiness probes
        registry: Metrics registry rendered by the metrics probe

    Returns:
        List of Starlette Route objects
    """

    async def liveness_probe(request: Request) -> Response:
        """Kubernetes liveness probe endpoint."""
        return Response(status_code=map_to_status_code(state.live))

    async def readiness_probe(request: Request) -> Response:
        """Kubernetes readiness probe endpoint."""
        return Response(status_code=map_to_status_code(state.ready))

    async def metrics_probe(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        media_type = registry.content_type
        try:
            body = await render_metrics(registry)
        except Exception:
            # Render failures (duplicate registration, collector errors)
            # are reported through the status code only.
            return Response(status_code=500, media_type=media_type)
        return Response(body, status_code=200, media_type=media_type)

    return [
        Route("/liveness", liveness_probe, methods=["GET"]),
        Route("/readiness", readiness_probe, methods=["GET"]),
        Route("/metrics", metrics_probe, methods=["GET"]),
    ]
