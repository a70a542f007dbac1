"""
Settings Loader

Builds Settings from three layers (highest precedence first):
1. Environment variables (GRIDINSOFT_API_KEY, INSPECTOR_MCP_<KEY>)
2. Optional YAML file named by INSPECTOR_MCP_CONFIG
3. Packaged defaults.yaml
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from inspector_mcp.config.settings import API_KEY_ENV, Settings
from inspector_mcp.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "INSPECTOR_MCP"
CONFIG_PATH_ENV = f"{ENV_PREFIX}_CONFIG"
DEFAULTS_PATH = Path(__file__).resolve().parent / "defaults.yaml"

# Settings field -> (yaml section, yaml key)
_YAML_KEYS = {
    "server_name": ("server", "name"),
    "timeout_seconds": ("http", "timeout_seconds"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigurationError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Malformed YAML in config file {path}: {e}"
        raise ConfigurationError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ConfigurationError(msg)
    return data


def _flatten(data: Mapping[str, Any]) -> dict[str, Any]:
    """Pick known keys out of a sectioned YAML mapping."""
    values: dict[str, Any] = {}
    for field_name, (section, key) in _YAML_KEYS.items():
        section_data = data.get(section)
        if isinstance(section_data, Mapping) and key in section_data:
            values[field_name] = section_data[key]
    return values


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect INSPECTOR_MCP_<FIELD> overrides.

    Example:
        INSPECTOR_MCP_LOG_LEVEL=DEBUG
        INSPECTOR_MCP_TIMEOUT_SECONDS=10
    """
    values: dict[str, Any] = {}
    for field_name in _YAML_KEYS:
        env_key = f"{ENV_PREFIX}_{field_name.upper()}"
        if env_key in environ:
            values[field_name] = _parse_env_value(environ[env_key])
    return values


def load_settings(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings for one process lifetime.

    Args:
        config_path: Optional YAML file layered over the packaged defaults.
            Falls back to the INSPECTOR_MCP_CONFIG environment variable.
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If a config file is unreadable or a value is invalid
    """
    env = os.environ if environ is None else environ

    values = _flatten(_read_yaml(DEFAULTS_PATH))

    path = config_path or env.get(CONFIG_PATH_ENV)
    if path:
        logger.debug("Loading config overrides from %s", path)
        values.update(_flatten(_read_yaml(Path(path))))

    values.update(_env_overrides(env))

    if "server_name" in values:
        values["server_name"] = str(values["server_name"])

    settings = Settings(api_key=env.get(API_KEY_ENV), **values)
    if not settings.has_credential:
        logger.warning("%s is not set; tool calls are disabled", API_KEY_ENV)
    return settings
