# utils/logging.py

import logging
import sys
from typing import Optional, Protocol

DEFAULT_LOGGER_NAME = "service_telemetry"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Handler installed by get_default_logger, replaced by setup_logging
_default_handler: Optional[logging.Handler] = None


class InfoLogger(Protocol):
    """Anything that accepts plain informational messages."""

    def info(self, message: str) -> None: ...


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure root logging for the telemetry runner.

    Console output goes to stdout; an optional file handler is added
    when `log_file` is given.
    """

    # Configure root logger
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # The package logger now defers to the root handlers
    package_logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    package_logger.propagate = True
    global _default_handler
    if _default_handler is not None:
        package_logger.removeHandler(_default_handler)
        _default_handler = None

    logging.info(f"Logging configured with level: {level}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the specified name."""
    return logging.getLogger(name)


def get_default_logger() -> logging.Logger:
    """
    Logger used when the host does not inject one.

    Writes INFO and above to stdout unless handlers are already attached
    to the package logger.
    """
    global _default_handler
    logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    _default_handler = handler
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger
