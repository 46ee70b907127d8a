"""
Profile service: the logged-in user's profile, skills and education.

Unlike the project board, profile edits are applied only once the server
has confirmed them: every entry needs a server-assigned id and nothing
else in the client depends on seeing it early. Input is validated first,
so a rejected edit never reaches the network.

The confirmed profile is kept in a local file so it can be shown offline.
"""

from __future__ import annotations

import logging

from roadmate.core.exceptions import NotFound, ValidationError
from roadmate.core.profiles import rules
from roadmate.core.profiles.models import Education, Skill, UserProfile
from roadmate.core.profiles.persistence import ProfileFile
from roadmate.core.sync.gateway import ProfileGateway

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Reads and edits the session user's profile.

    Example:
        >>> service = ProfileService(gateway, "alice", ProfileFile(data_dir, "alice"))
        >>> await service.refresh()
        >>> await service.add_skill("Go", 7)
        >>> service.profile.skills
    """

    def __init__(
        self,
        gateway: ProfileGateway,
        username: str,
        cache: ProfileFile | None = None,
    ) -> None:
        self.gateway = gateway
        self.username = username
        self.cache = cache
        cached = cache.load() if cache is not None else None
        self.profile = cached or UserProfile.default_for(username)

    def _changed(self) -> None:
        self.profile.sort_entries()
        if self.cache is None:
            return
        try:
            self.cache.save(self.profile)
        except OSError as e:
            logger.debug(f"Profile cache write failed: {e}")

    def _require_skill(self, skill_id: str) -> Skill:
        skill = self.profile.get_skill(skill_id)
        if skill is None:
            raise ValidationError(f"No skill {skill_id} on the profile", field="skill_id")
        return skill

    def _require_education(self, education_id: str) -> Education:
        education = self.profile.get_education(education_id)
        if education is None:
            raise ValidationError(
                f"No education {education_id} on the profile", field="education_id"
            )
        return education

    def find_skill(self, ref: str) -> Skill:
        """Find a skill by id or by name (case-insensitive)."""
        lower = ref.strip().lower()
        for skill in self.profile.skills:
            if skill.id == ref or skill.name.lower() == lower:
                return skill
        raise ValidationError(f"No skill {ref!r} on the profile", field="skill_id")

    # -------------------- profile --------------------

    async def refresh(self) -> UserProfile:
        """Replace the local profile with the server's."""
        self.profile = await self.gateway.fetch_profile()
        self._changed()
        return self.profile

    async def update_profile(
        self, name: str = "", headline: str = "", bio: str = ""
    ) -> UserProfile:
        """
        Update the profile text fields.

        Blank fields are left as they are, as the server does; when every
        field is blank nothing is sent.
        """
        fields = {"name": name.strip(), "headline": headline.strip(), "bio": bio.strip()}
        changes = {key: value for key, value in fields.items() if value}
        if not changes:
            return self.profile

        await self.gateway.update_profile(fields["name"], fields["headline"], fields["bio"])
        self.profile = self.profile.model_copy(update=changes)
        self._changed()
        return self.profile

    # -------------------- skills --------------------

    async def add_skill(self, name: str, proficiency: int) -> Skill:
        """
        Add a skill.

        Raises:
            ValidationError: Blank or duplicate name, or proficiency outside 1-10
            ServerError: If the server rejects it (409 for a duplicate it knows about)
        """
        name = rules.check_new_skill(self.profile, name, proficiency)
        skill = await self.gateway.add_skill(name, proficiency)
        self.profile.skills.append(skill)
        self._changed()
        return skill

    async def set_proficiency(self, skill_id: str, proficiency: int) -> Skill:
        """
        Change a skill's proficiency.

        Raises:
            ValidationError: Unknown skill or proficiency outside 1-10
            NotFound: If the skill was deleted server-side (local copy dropped)
        """
        self._require_skill(skill_id)
        rules.check_proficiency(proficiency)
        try:
            updated = await self.gateway.update_skill(skill_id, proficiency)
        except NotFound:
            self._drop_skill(skill_id)
            raise

        self.profile.skills = [updated if s.id == skill_id else s for s in self.profile.skills]
        self._changed()
        return updated

    async def remove_skill(self, skill_id: str) -> bool:
        """Delete a skill; one already gone on the server is removed locally too."""
        self._require_skill(skill_id)
        try:
            await self.gateway.delete_skill(skill_id)
        except NotFound:
            logger.info(f"Skill {skill_id} was already deleted on the server")
        return self._drop_skill(skill_id)

    def _drop_skill(self, skill_id: str) -> bool:
        before = len(self.profile.skills)
        self.profile.skills = [s for s in self.profile.skills if s.id != skill_id]
        if len(self.profile.skills) == before:
            return False
        self._changed()
        return True

    # -------------------- education --------------------

    async def add_education(
        self, school: str, degree: str, major: str, start_year: int, end_year: int
    ) -> Education:
        """
        Add an education entry.

        Raises:
            ValidationError: Blank field, start year after end year, or an
                identical entry
        """
        school, degree, major = rules.check_education(
            self.profile, school, degree, major, start_year, end_year
        )
        education = await self.gateway.add_education(school, degree, major, start_year, end_year)
        self.profile.educations.append(education)
        self._changed()
        return education

    async def update_education(
        self,
        education_id: str,
        school: str | None = None,
        degree: str | None = None,
        major: str | None = None,
        start_year: int | None = None,
        end_year: int | None = None,
    ) -> Education:
        """
        Edit an education entry; fields left as None keep their current value.

        Raises:
            ValidationError: Unknown entry or invalid result
            NotFound: If the entry was deleted server-side (local copy dropped)
        """
        current = self._require_education(education_id)
        start = current.start_year if start_year is None else start_year
        end = current.end_year if end_year is None else end_year
        school, degree, major = rules.check_education(
            self.profile,
            current.school if school is None else school,
            current.degree if degree is None else degree,
            current.major if major is None else major,
            start,
            end,
            education_id=education_id,
        )

        try:
            updated = await self.gateway.update_education(
                education_id, school, degree, major, start, end
            )
        except NotFound:
            self._drop_education(education_id)
            raise

        self.profile.educations = [
            updated if e.id == education_id else e for e in self.profile.educations
        ]
        self._changed()
        return updated

    async def remove_education(self, education_id: str) -> bool:
        """Delete an education entry; one already gone on the server is removed locally too."""
        self._require_education(education_id)
        try:
            await self.gateway.delete_education(education_id)
        except NotFound:
            logger.info(f"Education {education_id} was already deleted on the server")
        return self._drop_education(education_id)

    def _drop_education(self, education_id: str) -> bool:
        before = len(self.profile.educations)
        self.profile.educations = [e for e in self.profile.educations if e.id != education_id]
        if len(self.profile.educations) == before:
            return False
        self._changed()
        return True
