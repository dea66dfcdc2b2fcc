"""
Configuration loader with YAML and environment variable support.

Priority (highest to lowest):
1. Environment variables: SERVICE_TELEMETRY_SERVER__PORT=9100
2. User config: --config-dir path / ~/.service-telemetry/config.yaml
3. Built-in defaults: service_telemetry/config/defaults/settings.yaml
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from service_telemetry.config.models import TelemetryConfig

logger = logging.getLogger(__name__)

# Default config locations
DEFAULT_CONFIG_DIR = Path.home() / ".service-telemetry"
PACKAGE_DEFAULTS_DIR = Path(__file__).parent / "defaults"

# Environment variable prefix
ENV_PREFIX = "SERVICE_TELEMETRY_"
ENV_DELIMITER = "__"


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Values from 'override' take precedence over 'base'.
    Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if missing or unparsable."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            content = yaml.safe_load(f)
            return content if isinstance(content, dict) else {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return {}


def _get_env_overrides() -> dict[str, Any]:
    """
    Extract configuration overrides from environment variables.

    SERVICE_TELEMETRY_SERVER__PORT=9100 -> {"server": {"port": 9100}}
    SERVICE_TELEMETRY_METRICS__PLATFORM_COLLECTORS=false
        -> {"metrics": {"platform_collectors": False}}
    """
    overrides: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        key_path = key[len(ENV_PREFIX) :].lower().split(ENV_DELIMITER)
        if not all(key_path):
            continue

        current = overrides
        for part in key_path[:-1]:
            current = current.setdefault(part, {})

        current[key_path[-1]] = _parse_env_value(value)

    return overrides


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate Python type."""
    try:
        return int(value)
    except ValueError:
        pass

    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return float(value)
    except ValueError:
        pass

    return value


def load_config(config_dir: Optional[str | Path] = None) -> TelemetryConfig:
    """
    Load configuration from multiple sources.

    Args:
        config_dir: Optional path to configuration directory.
                   If not provided, uses ~/.service-telemetry/

    Returns:
        TelemetryConfig: Validated configuration object

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    config_data = _load_yaml_file(PACKAGE_DEFAULTS_DIR / "settings.yaml")

    user_config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
    user_config = _load_yaml_file(user_config_dir / "config.yaml")
    config_data = _deep_merge(config_data, user_config)

    config_data = _deep_merge(config_data, _get_env_overrides())

    return TelemetryConfig.model_validate(config_data)
