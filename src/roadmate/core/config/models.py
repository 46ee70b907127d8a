"""
Configuration data model for roadmate.

Defines the structure of ``~/.config/roadmate/config.json`` with validation
via Pydantic.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_BASE_URL = "http://localhost:8080"


def get_xdg_data_home() -> Path:
    """
    Get XDG data home directory.

    Returns:
        Path to data directory (defaults to ~/.local/share)
    """
    if xdg_home := os.environ.get("XDG_DATA_HOME"):
        return Path(xdg_home)
    return Path.home() / ".local" / "share"


def default_data_dir() -> Path:
    return get_xdg_data_home() / "roadmate"


class RoadmateConfig(BaseModel):
    """
    Client configuration.

    Example:
        >>> config = RoadmateConfig(api_base_url="https://roadmate.example.com")
        >>> config.request_timeout
        30.0
    """

    model_config = ConfigDict(extra="ignore")

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Root URL of the Roadmate API",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
    data_dir: Path = Field(
        default_factory=default_data_dir,
        description="Directory holding per-user project snapshots",
    )
    persist_snapshots: bool = Field(
        default=True,
        description="Write the project cache to disk after every change",
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_base_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_user(cls, v: object) -> object:
        if isinstance(v, str):
            return Path(v).expanduser()
        return v
