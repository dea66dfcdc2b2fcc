"""
Pydantic models for the telemetry runner configuration.

The ProbeServer itself takes no configuration beyond its constructor
arguments; these models describe how the standalone runner wires it up.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServerSettings(BaseModel):
    """Listener settings."""

    host: str = Field(
        default="0.0.0.0",
        description="Interface to bind the probe listener to",
    )
    port: int = Field(
        default=9464,
        ge=1,
        le=65535,
        description="Port the probes listen on",
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class MetricsSettings(BaseModel):
    """Metrics exposition settings."""

    platform_collectors: bool = Field(
        default=True,
        description="Expose prometheus_client's process/platform/gc collectors",
    )


class TelemetryConfig(BaseModel):
    """
    Main configuration container for the telemetry runner.

    Loaded from YAML files and environment variables, then passed to the
    runner explicitly.
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)

    # Allow extra fields to be ignored (forward compatibility)
    model_config = ConfigDict(extra="ignore")
