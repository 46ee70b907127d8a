"""
Configuration model and loading.

Layered: defaults < user config < ROADMATE_* env vars.
"""

from .loader import (
    ENV_KEYS,
    TOKEN_ENV,
    USERNAME_ENV,
    apply_env_overrides,
    clear_cache,
    deep_merge,
    get_user_config_path,
    get_user_env_path,
    get_xdg_config_home,
    load_config,
    load_layered_env,
)
from .models import DEFAULT_API_BASE_URL, RoadmateConfig, default_data_dir, get_xdg_data_home

__all__ = [
    "DEFAULT_API_BASE_URL",
    "ENV_KEYS",
    "TOKEN_ENV",
    "USERNAME_ENV",
    "RoadmateConfig",
    "apply_env_overrides",
    "clear_cache",
    "deep_merge",
    "default_data_dir",
    "get_user_config_path",
    "get_user_env_path",
    "get_xdg_config_home",
    "get_xdg_data_home",
    "load_config",
    "load_layered_env",
]
