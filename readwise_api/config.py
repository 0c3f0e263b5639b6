"""Configuration management for readwise_api.

Settings live in a JSON file in the platform configuration directory and are
merged over ``DEFAULT_CONFIG``. The access token is looked up in the
``READWISE_TOKEN`` environment variable first, then in an obfuscated token
file next to the configuration.
"""

import json
import logging
import os
import platform
from pathlib import Path
from typing import Any

from .auth import authenticate
from .client import ReadwiseClient
from .exceptions import ConfigurationError
from .transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .utils.credentials import load_token_from_file, mask_token, save_token_to_file

logger = logging.getLogger(__name__)

APP_NAME = "readwise-api"
TOKEN_ENV_VAR = "READWISE_TOKEN"

# Default configuration settings
DEFAULT_CONFIG = {
    "base_url": DEFAULT_BASE_URL,
    "timeout": DEFAULT_TIMEOUT,
    "max_read_retries": 0,
    "retry_backoff": 1.0,
    "log_level": "INFO",
}


def get_config_dir() -> Path:
    """Get the platform-specific configuration directory."""
    system = platform.system()
    home = Path.home()

    if system == "Darwin":  # macOS
        config_dir = home / "Library" / "Application Support" / APP_NAME
    elif system == "Windows":
        config_dir = Path(os.getenv("APPDATA", str(home / "AppData" / "Roaming"))) / APP_NAME
    else:  # Linux and others
        config_dir = Path(os.getenv("XDG_CONFIG_HOME", str(home / ".config"))) / APP_NAME

    return config_dir


def get_config_file_path() -> Path:
    """Get the path to the configuration file."""
    return get_config_dir() / "config.json"


def get_token_file_path() -> Path:
    """Get the path to the Readwise API token file."""
    return get_config_dir() / "credentials" / "readwise_token"


def load_config() -> dict[str, Any]:
    """Load configuration from file, merged over the defaults.

    A missing file yields the defaults. A file that cannot be parsed is
    reported and the defaults are used instead.
    """
    config = DEFAULT_CONFIG.copy()
    config_file = get_config_file_path()

    if not config_file.exists():
        logger.debug("No configuration file at %s, using defaults", config_file)
        return config

    try:
        with open(config_file) as f:
            stored = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Error loading configuration from %s: %s", config_file, e)
        logger.info("Using default configuration instead")
        return config

    if not isinstance(stored, dict):
        logger.error("Ignoring configuration file %s: expected a JSON object", config_file)
        return config

    config.update(stored)
    logger.debug("Loaded configuration from %s", config_file)
    return config


def save_config(config: dict[str, Any]) -> bool:
    """Save configuration to file.

    Returns:
        bool: True if successful, False otherwise
    """
    config_file = get_config_file_path()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        logger.error("Error saving configuration to %s: %s", config_file, e)
        return False
    logger.debug("Saved configuration to %s", config_file)
    return True


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value by key."""
    return load_config().get(key, default)


def set_config_value(key: str, value: Any) -> bool:
    """Set a configuration value and persist it."""
    config = load_config()
    config[key] = value
    return save_config(config)


def set_readwise_token(token: str) -> bool:
    """Store the Readwise API token in the token file.

    Returns:
        bool: True if stored successfully, False otherwise
    """
    if not token:
        logger.warning("Attempting to store empty API token")
        return False

    logger.info("Storing Readwise API token %s", mask_token(token))
    return save_token_to_file(token, get_token_file_path())


def get_readwise_token() -> str:
    """Resolve the access token from the environment or the token file.

    Returns:
        str: The token, or an empty string if none is configured
    """
    token = os.getenv(TOKEN_ENV_VAR, "").strip()
    if token:
        logger.debug("Using Readwise API token from %s: %s", TOKEN_ENV_VAR, mask_token(token))
        return token

    token = load_token_from_file(get_token_file_path())
    if token:
        logger.debug("Retrieved Readwise API token: %s", mask_token(token))
    else:
        logger.debug("No Readwise API token found")
    return token


def client_from_config() -> ReadwiseClient:
    """Authenticate with the configured token and settings.

    Raises:
        ConfigurationError: If no token is configured
        UnauthorizedError: If Readwise rejects the token
    """
    token = get_readwise_token()
    if not token:
        raise ConfigurationError(
            f"No Readwise API token configured. Set {TOKEN_ENV_VAR} or store one with set_readwise_token()."
        )

    config = load_config()
    return authenticate(
        token,
        base_url=config["base_url"],
        timeout=float(config["timeout"]),
        max_read_retries=int(config["max_read_retries"]),
        retry_backoff=float(config["retry_backoff"]),
    )
