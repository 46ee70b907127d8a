"""
User profile model, edit rules and local cache.

The service lives in ``roadmate.core.profiles.service``.

Example:
    >>> from roadmate.core.profiles import UserProfile
    >>> UserProfile.default_for("alice").name
    'alice'
"""

from roadmate.core.profiles.models import (
    MAX_PROFICIENCY,
    MIN_PROFICIENCY,
    Education,
    Skill,
    UserProfile,
)
from roadmate.core.profiles.persistence import ProfileFile

__all__ = [
    "MAX_PROFICIENCY",
    "MIN_PROFICIENCY",
    "Education",
    "ProfileFile",
    "Skill",
    "UserProfile",
]
