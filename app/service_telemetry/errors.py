"""
Exceptions raised by the telemetry server.
"""


class TelemetryError(Exception):
    """Base exception for telemetry server errors."""

    pass


class LifecycleError(TelemetryError):
    """Raised when start/stop is called in the wrong lifecycle phase."""

    pass
