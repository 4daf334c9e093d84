"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.tubeflow/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from tubeflow.infrastructure.resilience.request_executor import ExecutorConfig

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".tubeflow"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "TUBEFLOW_"
DEFAULT_API_BASE_URL = "http://localhost:5001"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_overrides: Dict[str, Any] = {}  # Set at runtime, e.g. from CLI flags
_test_config: Dict[str, Any] = {}
_loaded = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False keeps real environment variables on top
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    # 3. Environment variables are read lazily in get_config
    _loaded = True
    logger.debug("Configuration loading process completed.")


def reload_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Forgets any loaded configuration and loads it again."""
    global _loaded
    _loaded = False
    load_configuration(config_file=config_file, env_file=env_file)


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ('api.timeout_ms')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def _coerce_env_value(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def env_var_name(key: str) -> str:
    """'api.timeout_ms' -> 'TUBEFLOW_API_TIMEOUT_MS'."""
    return f"{ENV_PREFIX}{key.upper().replace('.', '_')}"


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dotted key.

    Priority:
    1. Test configuration
    2. Runtime overrides (set_config)
    3. Environment variable (TUBEFLOW_ prefixed, dots become underscores)
    4. YAML config
    5. Default value

    Args:
        key: The configuration key, e.g. 'api.base_url'
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    if key in _overrides:
        return _overrides[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce_env_value(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value for the current process.

    Overrides environment variables and the YAML file. Passing None
    removes a previous override.

    Args:
        key: Configuration key (e.g., 'logging.level')
        value: Value to set
    """
    logger.debug(f"Setting config: {key} = {value}")
    if value is None:
        _overrides.pop(key, None)
    else:
        _overrides[key] = value


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_api_base_url() -> str:
    """Base URL of the back-office API, without a trailing slash."""
    base_url = get_config('api.url') or get_config('api.base_url') or DEFAULT_API_BASE_URL
    return str(base_url).rstrip('/')


def get_api_token() -> Optional[str]:
    """Bearer token for authenticated requests, if one is configured."""
    token = get_config('api.token')
    return str(token) if token else None


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes', 'on'):
            return True
        if lowered in ('false', '0', 'no', 'off'):
            return False
        logger.warning(f"Unexpected boolean value '{value}'. Defaulting to {default}.")
        return default
    return bool(value)


def get_executor_config() -> ExecutorConfig:
    """Builds the request executor settings from configuration."""
    defaults = ExecutorConfig()
    return ExecutorConfig(
        timeout_ms=float(get_config('api.timeout_ms', defaults.timeout_ms)),
        max_retries=int(get_config('api.max_retries', defaults.max_retries)),
        retry_delay_ms=float(get_config('api.retry_delay_ms', defaults.retry_delay_ms)),
        retry_delay_multiplier=float(get_config('api.retry_delay_multiplier', defaults.retry_delay_multiplier)),
        notify_on_error=_as_bool(get_config('api.notify_on_error'), defaults.notify_on_error),
    )


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values and runtime overrides."""
    _test_config.clear()
    _overrides.clear()
    logger.debug("Cleared testing configuration")
