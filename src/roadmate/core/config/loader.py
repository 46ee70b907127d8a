"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < env vars

The ROADMATE_* variables may also come from .env files, see
``load_layered_env``.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from .models import DEFAULT_API_BASE_URL, RoadmateConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: RoadmateConfig | None = None

ENV_PREFIX = "ROADMATE_"

USERNAME_ENV = f"{ENV_PREFIX}USERNAME"
TOKEN_ENV = f"{ENV_PREFIX}TOKEN"

# Every variable Roadmate reads; anything else in a .env file is left alone
ENV_KEYS = frozenset(
    {
        f"{ENV_PREFIX}API_BASE_URL",
        f"{ENV_PREFIX}REQUEST_TIMEOUT",
        f"{ENV_PREFIX}DATA_DIR",
        f"{ENV_PREFIX}PERSIST_SNAPSHOTS",
        USERNAME_ENV,
        TOKEN_ENV,
    }
)


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/roadmate/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "roadmate" / "config.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries; values in ``override`` win.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 20}})
        {"a": 1, "b": {"x": 10, "y": 20}}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON object, or None if the file is missing or unreadable
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None

    if isinstance(data, dict):
        return data
    logger.warning(f"Ignoring config at {path}: expected a JSON object")
    return None


def _parse_bool(value: str) -> bool:
    return value.strip().lower() not in ("false", "0", "no", "")


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        ROADMATE_API_BASE_URL - overrides api_base_url
        ROADMATE_REQUEST_TIMEOUT - overrides request_timeout (seconds, > 0)
        ROADMATE_DATA_DIR - overrides data_dir
        ROADMATE_PERSIST_SNAPSHOTS - overrides persist_snapshots

    Invalid values are logged and ignored.
    """
    result = config_dict.copy()

    if base_url := os.environ.get(f"{ENV_PREFIX}API_BASE_URL"):
        result["api_base_url"] = base_url

    if timeout_str := os.environ.get(f"{ENV_PREFIX}REQUEST_TIMEOUT"):
        try:
            timeout = float(timeout_str)
        except ValueError:
            logger.warning(f"Invalid {ENV_PREFIX}REQUEST_TIMEOUT value '{timeout_str}', ignoring")
        else:
            if timeout <= 0:
                logger.warning(f"{ENV_PREFIX}REQUEST_TIMEOUT must be > 0, got {timeout}, ignoring")
            else:
                result["request_timeout"] = timeout

    if data_dir := os.environ.get(f"{ENV_PREFIX}DATA_DIR"):
        result["data_dir"] = data_dir

    if persist_str := os.environ.get(f"{ENV_PREFIX}PERSIST_SNAPSHOTS"):
        result["persist_snapshots"] = _parse_bool(persist_str)

    return result


def get_default_config() -> dict[str, Any]:
    return {
        "api_base_url": DEFAULT_API_BASE_URL,
        "request_timeout": 30.0,
        "persist_snapshots": True,
    }


def load_config(use_cache: bool = True) -> RoadmateConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (ROADMATE_*)
        2. User config (~/.config/roadmate/config.json)
        3. Hardcoded defaults

    Args:
        use_cache: If True, return cached config from previous load

    Raises:
        pydantic.ValidationError: If the merged config fails validation

    Example:
        >>> config = load_config()
        >>> config.api_base_url
        'http://localhost:8080'
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    merged = apply_env_overrides(merged)

    config = RoadmateConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """Clear the cached configuration (tests, or after config files change)."""
    global _config_cache
    _config_cache = None


def get_user_env_path() -> Path:
    return get_xdg_config_home() / "roadmate" / ".env"


def read_env_file(path: Path) -> dict[str, str]:
    """
    Read the Roadmate variables from a .env file.

    Keys outside ``ENV_KEYS`` and keys without a value are skipped.
    """
    if not path.is_file():
        return {}

    found: dict[str, str] = {}
    for key, value in dotenv_values(path).items():
        if key in ENV_KEYS and value is not None:
            found[key] = value
        elif key:
            logger.debug(f"Ignoring {key} from {path}")
    return found


def load_layered_env(
    project_dir: Path | None = None,
    user_env_path: Path | None = None,
) -> dict[str, str]:
    """
    Export Roadmate variables from .env files into the process environment.

    Precedence (highest to lowest):
        1. Process environment
        2. ``<project_dir>/.env.local``
        3. ``<project_dir>/.env``
        4. User env file (~/.config/roadmate/.env)

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)
        user_env_path: User env file (defaults to ``get_user_env_path()``)

    Returns:
        The variables that were exported
    """
    project_dir = project_dir or Path.cwd()
    layers = [
        user_env_path or get_user_env_path(),
        project_dir / ".env",
        project_dir / ".env.local",
    ]

    merged: dict[str, str] = {}
    for path in layers:
        merged.update(read_env_file(path))

    exported = {key: value for key, value in merged.items() if key not in os.environ}
    os.environ.update(exported)
    if exported:
        logger.debug(f"Loaded {', '.join(sorted(exported))} from .env files")
    return exported
