"""
Local copy of the user's profile.

Stored next to the project snapshot as ``profile-<username>.json`` so the
profile can be shown without a round-trip. A missing or unusable file
means "nothing cached".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError as ModelValidationError

from roadmate.core.profiles.models import UserProfile
from roadmate.core.store.persistence import atomic_write_text, safe_username

logger = logging.getLogger(__name__)


class ProfileFile:
    """
    JSON file holding one user's profile.

    Example:
        >>> cache = ProfileFile(Path("~/.local/share/roadmate"), "alice")
        >>> cache.save(profile)
        >>> cache.load()
    """

    def __init__(self, data_dir: Path, username: str) -> None:
        self.path = Path(data_dir) / f"profile-{safe_username(username)}.json"

    def save(self, profile: UserProfile) -> None:
        atomic_write_text(self.path, profile.model_dump_json(indent=2, by_alias=True))

    def load(self) -> UserProfile | None:
        if not self.path.exists():
            return None
        try:
            return UserProfile.model_validate(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ModelValidationError) as e:
            logger.warning(f"Ignoring cached profile {self.path}: {e}")
            return None
