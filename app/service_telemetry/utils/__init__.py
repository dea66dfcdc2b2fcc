from service_telemetry.utils.logging import (
    InfoLogger,
    get_default_logger,
    get_logger,
    setup_logging,
)

__all__ = [
    "InfoLogger",
    "get_default_logger",
    "get_logger",
    "setup_logging",
]
