"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a YAML
configuration file (~/.capsweep/config.yaml). Nested YAML sections are
flattened into dotted keys, so `run: {max_retries: 5}` is read with
`get_config('run.max_retries')` and overridden by the RUN_MAX_RETRIES
environment variable.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
import yaml

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".capsweep"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

DEFAULT_BASE_URL = "https://ws.api.video"
DEFAULT_MAX_RETRIES = 3
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_PROFILE = "standard"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def env_var_name(key: str) -> str:
    """Maps a dotted config key to its environment variable name."""
    return key.upper().replace(".", "_").replace("-", "_")


def _coerce(value: str) -> Any:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        if "." in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to the getters

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
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a mapping.")
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

    # 3. Environment variables are read lazily by get_config
    _loaded = True
    logger.debug("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets loaded configuration so the next load starts fresh."""
    global _config, _loaded
    _config = {}
    _loaded = False


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable
    3. YAML config
    4. Default value

    Args:
        key: The configuration key, e.g. 'run.max_retries'.
        default: Default value if the key is not found.

    Returns:
        The configuration value, with 'true'/'false' and numbers coerced
        when read from the environment.
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    try:
        cwd = Path.cwd()
        for path in [cwd] + list(cwd.parents):
            env_path = path / ENV_FILE_NAME
            if env_path.is_file():
                return env_path
    except OSError as e:
        logger.warning(f"Error searching for .env file: {e}")
    return None


# --- Convenience Functions ---

def get_api_key() -> Optional[str]:
    """Returns API_KEY (env / .env) or api_key from YAML."""
    key = get_config("api_key")
    return str(key) if key not in (None, "") else None


def get_base_url() -> str:
    return str(get_config("base_url", DEFAULT_BASE_URL))


def get_max_retries() -> int:
    value = get_config("run.max_retries", DEFAULT_MAX_RETRIES)
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        logger.warning(f"Invalid run.max_retries '{value}'. Using {DEFAULT_MAX_RETRIES}.")
        return DEFAULT_MAX_RETRIES


def get_http_timeout() -> float:
    value = get_config("http.timeout_seconds", DEFAULT_HTTP_TIMEOUT)
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid http.timeout_seconds '{value}'. Using {DEFAULT_HTTP_TIMEOUT}.")
        return DEFAULT_HTTP_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_HTTP_TIMEOUT


def get_profile_name() -> str:
    return str(get_config("run.profile", DEFAULT_PROFILE))


def get_page_size() -> Optional[int]:
    """Page size override from configuration; None keeps the profile's."""
    value = get_config("run.page_size")
    if value is None:
        return None
    try:
        size = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid run.page_size '{value}'. Ignoring.")
        return None
    return size if size > 0 else None


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
