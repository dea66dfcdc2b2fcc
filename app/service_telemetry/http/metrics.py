"""
Prometheus metrics registry adapter.

The /metrics route only needs two things from a registry: the exposition
content type and a call that renders the current metrics as text. Any
object providing those can be passed to ProbeServer.
"""

import inspect
from typing import Awaitable, Optional, Protocol, Union

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest
from starlette.concurrency import run_in_threadpool


class MetricsRegistry(Protocol):
    """Registry rendering metrics in an exposition format."""

    content_type: str

    def metrics(self) -> Union[str, Awaitable[str]]: ...


class PrometheusRegistry:
    """
    Adapter over a prometheus_client CollectorRegistry.

    Defaults to the process-wide prometheus_client REGISTRY so metrics
    defined anywhere in the host application are exposed.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY

    def metrics(self) -> str:
        """Render all registered collectors in text exposition format."""
        return generate_latest(self.registry).decode("utf-8")


async def render_metrics(registry: MetricsRegistry) -> str:
    """
    Render metrics without blocking the event loop.

    Synchronous registries run in the threadpool; registries returning an
    awaitable are awaited directly.
    """
    render = registry.metrics
    if inspect.iscoroutinefunction(render):
        return await render()

    result = await run_in_threadpool(render)
    if inspect.isawaitable(result):
        result = await result
    return result
