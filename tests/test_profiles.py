"""
Tests for the user profile: models, edit rules, local cache and service.

Service tests run against the in-memory fake gateway from conftest.
"""

import json

import pytest
from pydantic import ValidationError as ModelValidationError

from roadmate.core.exceptions import NotFound, ServerError, ValidationError
from roadmate.core.profiles import Education, ProfileFile, Skill, UserProfile
from roadmate.core.profiles import rules
from roadmate.core.profiles.service import ProfileService


@pytest.fixture
def profile():
    """alice with two skills and one degree."""
    return UserProfile(
        username="alice",
        name="Alice",
        skills=[
            Skill(id="s1", name="Go", proficiency=8),
            Skill(id="s2", name="SQL", proficiency=4),
        ],
        educations=[
            Education(
                id="e1", school="MIT", degree="BSc", major="CS", start_year=2015, end_year=2019
            )
        ],
    )


@pytest.fixture
def service(fake_gateway):
    return ProfileService(fake_gateway, "alice")


class TestModels:
    """Tests for the profile models."""

    def test_default_profile_uses_username(self):
        profile = UserProfile.default_for("alice")
        assert profile.name == "alice"
        assert profile.skills == []

    @pytest.mark.parametrize("proficiency", [0, 11])
    def test_skill_proficiency_range(self, proficiency):
        with pytest.raises(ModelValidationError):
            Skill(id="s1", name="Go", proficiency=proficiency)

    def test_education_wire_names(self):
        education = Education.model_validate(
            {
                "id": "e1",
                "school": "MIT",
                "degree": "BSc",
                "major": "CS",
                "startyear": 2015,
                "endyear": 2015,
            }
        )
        assert education.years == "2015"
        assert education.model_dump(by_alias=True)["endyear"] == 2015

    def test_education_end_before_start(self):
        with pytest.raises(ModelValidationError):
            Education(id="e1", school="MIT", degree="BSc", major="CS", start_year=2019, end_year=2015)

    def test_sort_entries(self, profile):
        profile.skills.append(Skill(id="s3", name="awk", proficiency=8))
        profile.educations.append(
            Education(id="e2", school="ETH", degree="MSc", major="CS", start_year=2019, end_year=2021)
        )
        profile.sort_entries()
        assert [s.name for s in profile.skills] == ["awk", "Go", "SQL"]
        assert [e.school for e in profile.educations] == ["ETH", "MIT"]


class TestRules:
    """Tests for client-side profile checks."""

    def test_skill_name_trimmed(self, profile):
        assert rules.check_new_skill(profile, "  Rust ", 5) == "Rust"

    def test_blank_skill_name(self, profile):
        with pytest.raises(ValidationError) as exc_info:
            rules.check_new_skill(profile, "   ", 5)
        assert exc_info.value.field == "name"

    def test_duplicate_skill_ignores_case(self, profile):
        with pytest.raises(ValidationError, match="already listed"):
            rules.check_new_skill(profile, "go", 5)

    @pytest.mark.parametrize("proficiency", [0, 11, -3])
    def test_proficiency_out_of_range(self, profile, proficiency):
        with pytest.raises(ValidationError) as exc_info:
            rules.check_new_skill(profile, "Rust", proficiency)
        assert exc_info.value.field == "proficiency"

    @pytest.mark.parametrize("proficiency", [1, 10])
    def test_proficiency_bounds_accepted(self, proficiency):
        assert rules.check_proficiency(proficiency) == proficiency

    def test_start_year_after_end_year(self, profile):
        with pytest.raises(ValidationError, match="Start year 2021 is after end year 2019") as exc_info:
            rules.check_education(profile, "ETH", "MSc", "CS", 2021, 2019)
        assert exc_info.value.field == "start_year"

    def test_same_start_and_end_year(self, profile):
        assert rules.check_education(profile, " ETH ", "MSc", "CS", 2020, 2020) == (
            "ETH",
            "MSc",
            "CS",
        )

    def test_missing_year(self, profile):
        with pytest.raises(ValidationError, match="End year is required"):
            rules.check_education(profile, "ETH", "MSc", "CS", 2019, 0)

    def test_blank_degree(self, profile):
        with pytest.raises(ValidationError) as exc_info:
            rules.check_education(profile, "ETH", " ", "CS", 2019, 2021)
        assert exc_info.value.field == "degree"

    def test_identical_education(self, profile):
        with pytest.raises(ValidationError, match="already listed"):
            rules.check_education(profile, "mit", "BSc", "CS", 2015, 2019)

    def test_editing_entry_is_not_its_own_duplicate(self, profile):
        rules.check_education(profile, "MIT", "BSc", "CS", 2015, 2019, education_id="e1")


class TestProfileFile:
    """Tests for the cached profile file."""

    def test_roundtrip_keeps_wire_names(self, tmp_path, profile):
        cache = ProfileFile(tmp_path, "alice")
        cache.save(profile)

        raw = json.loads(cache.path.read_text())
        assert raw["educations"][0]["startyear"] == 2015
        assert cache.load() == profile

    def test_missing_file(self, tmp_path):
        assert ProfileFile(tmp_path, "alice").load() is None

    def test_corrupt_file(self, tmp_path):
        cache = ProfileFile(tmp_path, "alice")
        cache.path.write_text("{not json")
        assert cache.load() is None

    def test_users_get_separate_files(self, tmp_path):
        assert ProfileFile(tmp_path, "alice").path != ProfileFile(tmp_path, "bob").path


class TestProfileService:
    """Tests for profile edits through the gateway."""

    def test_starts_from_cache(self, tmp_path, fake_gateway, profile):
        cache = ProfileFile(tmp_path, "alice")
        cache.save(profile)
        assert ProfileService(fake_gateway, "alice", cache).profile == profile

    def test_starts_from_username_without_cache(self, service):
        assert service.profile.name == "alice"

    @pytest.mark.asyncio
    async def test_refresh(self, service, fake_gateway):
        fake_gateway.profile.headline = "Backend engineer"
        profile = await service.refresh()
        assert profile.headline == "Backend engineer"
        assert profile is not fake_gateway.profile

    @pytest.mark.asyncio
    async def test_update_keeps_blank_fields(self, service, fake_gateway):
        await service.update_profile(name="Alice", headline="Backend engineer")
        await service.update_profile(bio="  Likes boards  ")

        assert service.profile.name == "Alice"
        assert service.profile.headline == "Backend engineer"
        assert service.profile.bio == "Likes boards"
        assert fake_gateway.profile.bio == "Likes boards"

    @pytest.mark.asyncio
    async def test_update_with_nothing_sends_nothing(self, service, fake_gateway):
        await service.update_profile(name="  ")
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_failed_update_leaves_profile(self, service, fake_gateway):
        fake_gateway.fail_with = ServerError(500, "database down")
        with pytest.raises(ServerError):
            await service.update_profile(name="Alice")
        assert service.profile.name == "alice"

    @pytest.mark.asyncio
    async def test_add_skill_orders_by_proficiency(self, service):
        await service.add_skill("SQL", 4)
        skill = await service.add_skill(" Go ", 8)

        assert skill.id.startswith("skill-")
        assert [s.name for s in service.profile.skills] == ["Go", "SQL"]

    @pytest.mark.asyncio
    async def test_invalid_skill_never_sent(self, service, fake_gateway):
        with pytest.raises(ValidationError):
            await service.add_skill("Go", 11)
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_server_duplicate_skill(self, service, fake_gateway):
        """The server may know a skill the local copy hasn't seen yet."""
        fake_gateway.profile.skills.append(Skill(id="s9", name="Go", proficiency=3))
        with pytest.raises(ServerError) as exc_info:
            await service.add_skill("Go", 8)
        assert exc_info.value.code == 409
        assert service.profile.skills == []

    @pytest.mark.asyncio
    async def test_set_proficiency(self, service, fake_gateway):
        skill = await service.add_skill("SQL", 4)
        await service.add_skill("Go", 6)

        await service.set_proficiency(skill.id, 9)
        assert [s.name for s in service.profile.skills] == ["SQL", "Go"]
        assert fake_gateway.profile.get_skill(skill.id).proficiency == 9

    @pytest.mark.asyncio
    async def test_set_proficiency_out_of_range(self, service, fake_gateway):
        skill = await service.add_skill("Go", 6)
        with pytest.raises(ValidationError):
            await service.set_proficiency(skill.id, 0)
        assert service.profile.get_skill(skill.id).proficiency == 6

    @pytest.mark.asyncio
    async def test_set_proficiency_on_deleted_skill(self, service, fake_gateway):
        skill = await service.add_skill("Go", 6)
        fake_gateway.profile.skills.clear()

        with pytest.raises(NotFound):
            await service.set_proficiency(skill.id, 7)
        assert service.profile.skills == []

    @pytest.mark.asyncio
    async def test_remove_skill_already_gone(self, service, fake_gateway):
        skill = await service.add_skill("Go", 6)
        fake_gateway.profile.skills.clear()

        assert await service.remove_skill(skill.id) is True
        assert service.profile.skills == []

    @pytest.mark.asyncio
    async def test_unknown_skill(self, service):
        with pytest.raises(ValidationError):
            await service.remove_skill("s404")

    @pytest.mark.asyncio
    async def test_find_skill_by_name(self, service):
        skill = await service.add_skill("Go", 6)
        assert service.find_skill("go") == skill
        assert service.find_skill(skill.id) == skill

    @pytest.mark.asyncio
    async def test_add_education_start_after_end(self, service, fake_gateway):
        with pytest.raises(ValidationError, match="Start year 2021 is after end year 2019"):
            await service.add_education("ETH", "MSc", "CS", 2021, 2019)
        assert fake_gateway.calls == []
        assert service.profile.educations == []

    @pytest.mark.asyncio
    async def test_add_and_edit_education(self, service, fake_gateway):
        education = await service.add_education("MIT", "BSc", "CS", 2015, 2019)
        updated = await service.update_education(education.id, end_year=2020)

        assert updated.end_year == 2020
        assert updated.school == "MIT"
        assert service.profile.educations == [updated]
        assert fake_gateway.profile.educations[0].end_year == 2020

    @pytest.mark.asyncio
    async def test_edit_education_checks_merged_years(self, service, fake_gateway):
        education = await service.add_education("MIT", "BSc", "CS", 2015, 2019)
        with pytest.raises(ValidationError, match="after end year"):
            await service.update_education(education.id, start_year=2020)
        assert ("update_education", education.id) not in fake_gateway.calls

    @pytest.mark.asyncio
    async def test_edit_education_deleted_on_server(self, service, fake_gateway):
        education = await service.add_education("MIT", "BSc", "CS", 2015, 2019)
        fake_gateway.profile.educations.clear()

        with pytest.raises(NotFound):
            await service.update_education(education.id, major="Math")
        assert service.profile.educations == []

    @pytest.mark.asyncio
    async def test_remove_education(self, service, fake_gateway):
        education = await service.add_education("MIT", "BSc", "CS", 2015, 2019)
        assert await service.remove_education(education.id) is True
        assert fake_gateway.profile.educations == []

    @pytest.mark.asyncio
    async def test_confirmed_edits_are_cached(self, tmp_path, fake_gateway):
        cache = ProfileFile(tmp_path, "alice")
        await ProfileService(fake_gateway, "alice", cache).add_skill("Go", 6)

        restored = ProfileService(fake_gateway, "alice", cache)
        assert [s.name for s in restored.profile.skills] == ["Go"]
