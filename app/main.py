#!/usr/bin/env python3
"""
Service Telemetry - Standalone Runner

Starts the probe server for a process that only needs the probes, and
demonstrates the startup/shutdown sequence a host application follows.
"""

import argparse
import signal
import sys
import threading
from pathlib import Path

# Add app directory to path for imports when running directly
APP_DIR = Path(__file__).parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from prometheus_client import GC_COLLECTOR, PLATFORM_COLLECTOR, PROCESS_COLLECTOR, REGISTRY
from pydantic import ValidationError

from service_telemetry import __version__
from service_telemetry.config import TelemetryConfig, load_config
from service_telemetry.server import ProbeServer
from service_telemetry.utils.logging import get_logger, setup_logging

logger = get_logger("service_telemetry.main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Liveness/readiness probes and Prometheus metrics endpoint",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start on the configured port (default 9464)
  python main.py

  # Override the port
  python main.py --port 9100

  # Use custom config directory
  python main.py --config-dir /path/to/config
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"service-telemetry {__version__}",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        help="Configuration directory path (default: ~/.service-telemetry/)",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (overrides config)",
    )
    return parser.parse_args(argv)


def apply_overrides(config: TelemetryConfig, args: argparse.Namespace) -> TelemetryConfig:
    """Apply CLI overrides on top of the loaded configuration."""
    overrides = {
        key: value
        for key, value in (
            ("host", args.host),
            ("port", args.port),
            ("log_level", args.log_level),
        )
        if value is not None
    }
    if not overrides:
        return config
    server = config.server.model_validate({**config.server.model_dump(), **overrides})
    return config.model_copy(update={"server": server})


def disable_platform_collectors() -> None:
    """Drop prometheus_client's default process/platform/gc collectors."""
    for collector in (PROCESS_COLLECTOR, PLATFORM_COLLECTOR, GC_COLLECTOR):
        try:
            REGISTRY.unregister(collector)
        except KeyError:
            pass


def setup_signal_handlers(shutdown: threading.Event) -> None:
    """Setup SIGTERM/SIGINT handlers that request shutdown."""

    def handle_shutdown(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        shutdown.set()

    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = apply_overrides(load_config(args.config_dir), args)
    except ValidationError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.server.log_level)

    if not config.metrics.platform_collectors:
        disable_platform_collectors()

    shutdown = threading.Event()
    setup_signal_handlers(shutdown)

    try:
        telemetry = ProbeServer(logger=get_logger("service_telemetry"), host=config.server.host)
        telemetry.start(config.server.port)
    except OSError as e:
        print(f"Failed to bind {config.server.host}:{config.server.port}: {e}", file=sys.stderr)
        return 1

    telemetry.signal_ready()
    shutdown.wait()

    telemetry.signal_stopped()
    telemetry.stop()
    telemetry.wait_stopped(timeout=10)
    logger.info(f"Final state: {telemetry.state.snapshot()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
