"""
Client-side checks for profile edits.

Each function either returns the cleaned-up input or raises
``ValidationError`` before anything is sent to the server.
"""

from __future__ import annotations

from roadmate.core.exceptions import ValidationError
from roadmate.core.profiles.models import MAX_PROFICIENCY, MIN_PROFICIENCY, UserProfile


def check_proficiency(proficiency: int) -> int:
    if not MIN_PROFICIENCY <= proficiency <= MAX_PROFICIENCY:
        raise ValidationError(
            f"Proficiency must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}",
            field="proficiency",
        )
    return proficiency


def check_new_skill(profile: UserProfile, name: str, proficiency: int) -> str:
    """
    Validate a skill about to be added.

    Returns:
        The trimmed skill name

    Raises:
        ValidationError: Blank or duplicate name (case-insensitive), or
            proficiency outside 1-10
    """
    trimmed = name.strip()
    if not trimmed:
        raise ValidationError("Skill name cannot be empty", field="name")
    check_proficiency(proficiency)

    lower = trimmed.lower()
    if any(s.name.lower() == lower for s in profile.skills):
        raise ValidationError(f"Skill {trimmed} is already listed", field="name")
    return trimmed


def check_education(
    profile: UserProfile,
    school: str,
    degree: str,
    major: str,
    start_year: int,
    end_year: int,
    education_id: str | None = None,
) -> tuple[str, str, str]:
    """
    Validate an education entry being added or edited.

    ``education_id`` names the entry being edited so it doesn't count as its
    own duplicate.

    Returns:
        The trimmed (school, degree, major)

    Raises:
        ValidationError: A blank field, a missing year, start year after end
            year, or an identical entry already on the profile
    """
    fields = {"school": school.strip(), "degree": degree.strip(), "major": major.strip()}
    for field, value in fields.items():
        if not value:
            raise ValidationError(f"{field.capitalize()} cannot be empty", field=field)

    if start_year <= 0:
        raise ValidationError("Start year is required", field="start_year")
    if end_year <= 0:
        raise ValidationError("End year is required", field="end_year")
    if start_year > end_year:
        raise ValidationError(
            f"Start year {start_year} is after end year {end_year}", field="start_year"
        )

    key = (fields["school"].lower(), fields["degree"].lower(), fields["major"].lower())
    for existing in profile.educations:
        if existing.id == education_id:
            continue
        if (
            (existing.school.lower(), existing.degree.lower(), existing.major.lower()) == key
            and existing.start_year == start_year
            and existing.end_year == end_year
        ):
            raise ValidationError("This education is already listed", field="school")

    return fields["school"], fields["degree"], fields["major"]
