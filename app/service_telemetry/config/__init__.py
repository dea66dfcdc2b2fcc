"""
Configuration for the telemetry runner.

Exports:
    TelemetryConfig: Main configuration container
    load_config: Load configuration from YAML/env
"""

from service_telemetry.config.models import (
    MetricsSettings,
    ServerSettings,
    TelemetryConfig,
)
from service_telemetry.config.loader import load_config

__all__ = [
    "TelemetryConfig",
    "ServerSettings",
    "MetricsSettings",
    "load_config",
]
