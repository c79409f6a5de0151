"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a YAML
configuration file (~/.ghlens/config.yaml). Dotted keys such as
'cache.ttl_seconds' map to environment variables GHLENS_CACHE_TTL_SECONDS
or CACHE_TTL_SECONDS.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional, Dict

import yaml
from dotenv import load_dotenv

from ghlens.domain.models.common import BackoffPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".ghlens"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "GHLENS_"

DEFAULTS: Dict[str, Any] = {
    "github.base_url": "https://api.github.com",
    "github.user_agent": "B4OS-Dashboard/1.0",
    "github.api_version": "2022-11-28",
    "github.accept": "application/vnd.github.v3+json",
    "github.timeout_seconds": 10.0,
    "cache.ttl_seconds": 300,
    "cache.max_entries": 100,
    "retry.max_retries": 3,
    "retry.initial_backoff_seconds": 1.0,
    "retry.backoff_factor": 2.0,
    "retry.max_backoff_seconds": 10.0,
    "repos.default_count": 3,
    "rate_limit.poll_interval_seconds": 30,
    "logging.level": "WARNING",
    "logging.format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False

def _flatten(data: Dict[str, Any], parent: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat

def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from the YAML file and the .env file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. DEFAULTS

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
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

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: ENV VARS take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    # 3. Environment Variables (Highest priority) are handled in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")

def _coerce(value: str) -> Any:
    """Converts 'true'/'false' and numeric strings to Python values."""
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value

def _env_names(key: str) -> tuple:
    base = key.upper().replace('.', '_')
    return (f"{ENV_PREFIX}{base}", base)

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable
    3. YAML config
    4. DEFAULTS, then the default argument

    Args:
        key: The configuration key (e.g., 'cache.ttl_seconds')
        default: Default value if the key is not found anywhere

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    for env_key in _env_names(key):
        if env_key in os.environ:
            return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    if default is None and key in DEFAULTS:
        return DEFAULTS[key]
    return default

def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_github_token() -> Optional[str]:
    """Optional token; raises the unauthenticated 60/h quota to 5000/h."""
    token = get_config('github.token') or os.environ.get('GITHUB_TOKEN')
    return str(token) if token else None

def get_github_settings() -> Dict[str, Any]:
    """Everything needed to build the shared HTTP client."""
    return {
        "base_url": str(get_config('github.base_url')),
        "user_agent": str(get_config('github.user_agent')),
        "api_version": str(get_config('github.api_version')),
        "accept": str(get_config('github.accept')),
        "timeout": float(get_config('github.timeout_seconds')),
        "token": get_github_token(),
    }

def get_retry_policy() -> BackoffPolicy:
    return BackoffPolicy(
        max_retries=int(get_config('retry.max_retries')),
        initial_delay=float(get_config('retry.initial_backoff_seconds')),
        factor=float(get_config('retry.backoff_factor')),
        max_delay=float(get_config('retry.max_backoff_seconds')),
    )

def get_cache_settings() -> Dict[str, Any]:
    max_entries = get_config('cache.max_entries')
    return {
        "ttl": float(get_config('cache.ttl_seconds')),
        "max_entries": int(max_entries) if max_entries else None,
    }

def get_default_repo_count() -> int:
    return int(get_config('repos.default_count'))

def get_poll_interval() -> float:
    return float(get_config('rate_limit.poll_interval_seconds'))

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

# Load configuration when the module is imported
load_configuration()
