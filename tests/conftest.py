"""
Pytest configuration and shared fixtures.

Provides sample projects, an in-memory fake of the API gateway, isolated
config/env directories and other test utilities used across the suite.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from roadmate.core.exceptions import GatewayError, NotFound, ServerError
from roadmate.core.profiles.models import Education, Skill, UserProfile
from roadmate.core.projects.models import Project, ProjectMember, TaskItem, TaskStatus
from roadmate.core.store import ProjectStore
from roadmate.core.sync.models import ProjectDetails

FIXED_TIME = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

# ==============================================================================
# Fake Gateway
# ==============================================================================


class FakeGateway:
    """
    In-memory stand-in for the Roadmate API.

    Server ids are ``<kind>-<n>`` from a shared counter. Set ``fail_with`` to
    make the next calls raise; set ``hold`` to park every call on its own
    Event (collected in ``held``) so tests can release responses in any order.
    """

    def __init__(self, username: str = "alice") -> None:
        self.username = username
        self.projects: dict[str, Project] = {}
        self.profile = UserProfile.default_for(username)
        self.calls: list[tuple] = []
        self.fail_with: GatewayError | None = None
        self.hold = False
        self.held: list[asyncio.Event] = []
        self._counter = 0

    def _next_id(self, kind: str) -> str:
        self._counter += 1
        return f"{kind}-{self._counter}"

    async def _respond(self) -> None:
        if self.hold:
            event = asyncio.Event()
            self.held.append(event)
            await event.wait()
        if self.fail_with is not None:
            raise self.fail_with

    def seed(self, name: str, description: str = "") -> Project:
        """Create a project directly on the 'server'."""
        owner = ProjectMember(id=self._next_id("user"), username=self.username)
        project = Project(
            id=self._next_id("proj"),
            name=name,
            description=description,
            members=[owner],
            owner_member_id=owner.id,
        )
        self.projects[project.id] = project
        return project

    async def fetch_projects(self) -> list[Project]:
        self.calls.append(("fetch_projects",))
        await self._respond()
        return [p.model_copy(deep=True) for p in self.projects.values()]

    async def create_project(self, name: str, description: str) -> Project:
        self.calls.append(("create_project", name, description))
        await self._respond()
        return self.seed(name, description).model_copy(deep=True)

    async def update_project(self, project_id: str, name: str, description: str) -> ProjectDetails:
        self.calls.append(("update_project", project_id, name, description))
        await self._respond()
        project = self.projects.get(project_id)
        if project is None:
            raise NotFound(project_id)
        project.name = name
        project.description = description
        return ProjectDetails(id=project_id, name=name, description=description)

    async def delete_project(self, project_id: str) -> None:
        self.calls.append(("delete_project", project_id))
        await self._respond()
        if self.projects.pop(project_id, None) is None:
            raise NotFound(project_id)

    async def create_task(
        self,
        project_id: str,
        title: str,
        details: str,
        status: TaskStatus,
        assignee_id: str | None,
        difficulty: int,
    ) -> TaskItem:
        self.calls.append(("create_task", project_id, title))
        await self._respond()
        if project_id not in self.projects:
            raise ServerError(404, "project not found")
        return TaskItem(
            id=self._next_id("task"),
            title=title,
            details=details,
            status=status,
            assignee_id=assignee_id,
            difficulty=difficulty,
            created_at=FIXED_TIME,
            sort_index=0,
        )

    async def fetch_profile(self) -> UserProfile:
        self.calls.append(("fetch_profile",))
        await self._respond()
        profile = self.profile.model_copy(deep=True)
        profile.sort_entries()
        return profile

    async def update_profile(self, name: str, headline: str, bio: str) -> None:
        self.calls.append(("update_profile", name, headline, bio))
        await self._respond()
        changes = {"name": name, "headline": headline, "bio": bio}
        self.profile = self.profile.model_copy(update={k: v for k, v in changes.items() if v})

    async def add_skill(self, name: str, proficiency: int) -> Skill:
        self.calls.append(("add_skill", name, proficiency))
        await self._respond()
        if any(s.name.lower() == name.lower() for s in self.profile.skills):
            raise ServerError(409, "skill already exists")
        skill = Skill(id=self._next_id("skill"), name=name, proficiency=proficiency)
        self.profile.skills.append(skill)
        return skill.model_copy()

    async def update_skill(self, skill_id: str, proficiency: int) -> Skill:
        self.calls.append(("update_skill", skill_id, proficiency))
        await self._respond()
        skill = self.profile.get_skill(skill_id)
        if skill is None:
            raise NotFound(skill_id)
        skill.proficiency = proficiency
        return skill.model_copy()

    async def delete_skill(self, skill_id: str) -> None:
        self.calls.append(("delete_skill", skill_id))
        await self._respond()
        if self.profile.get_skill(skill_id) is None:
            raise NotFound(skill_id)
        self.profile.skills = [s for s in self.profile.skills if s.id != skill_id]

    async def add_education(
        self, school: str, degree: str, major: str, start_year: int, end_year: int
    ) -> Education:
        self.calls.append(("add_education", school))
        await self._respond()
        education = Education(
            id=self._next_id("edu"),
            school=school,
            degree=degree,
            major=major,
            start_year=start_year,
            end_year=end_year,
        )
        self.profile.educations.append(education)
        return education.model_copy()

    async def update_education(
        self,
        education_id: str,
        school: str,
        degree: str,
        major: str,
        start_year: int,
        end_year: int,
    ) -> Education:
        self.calls.append(("update_education", education_id))
        await self._respond()
        if self.profile.get_education(education_id) is None:
            raise NotFound(education_id)
        updated = Education(
            id=education_id,
            school=school,
            degree=degree,
            major=major,
            start_year=start_year,
            end_year=end_year,
        )
        self.profile.educations = [
            updated if e.id == education_id else e for e in self.profile.educations
        ]
        return updated.model_copy()

    async def delete_education(self, education_id: str) -> None:
        self.calls.append(("delete_education", education_id))
        await self._respond()
        if self.profile.get_education(education_id) is None:
            raise NotFound(education_id)
        self.profile.educations = [e for e in self.profile.educations if e.id != education_id]


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def owner():
    """Project owner 'alice'."""
    return ProjectMember(id="m-alice", username="alice", role_key="frontend")


@pytest.fixture
def sample_project(owner):
    """Project 'Alpha' with alice (owner) and bob, and an empty board."""
    bob = ProjectMember(id="m-bob", username="bob", role_key="backend")
    return Project(
        id="p-alpha",
        name="Alpha",
        description="First project",
        members=[owner, bob],
        owner_member_id=owner.id,
    )


@pytest.fixture
def make_task():
    """Factory for tasks with explicit ids."""

    def _make(task_id: str, status: TaskStatus = TaskStatus.BACKLOG, **kwargs) -> TaskItem:
        return TaskItem(id=task_id, title=kwargs.pop("title", task_id.upper()), status=status, **kwargs)

    return _make


@pytest.fixture
def store():
    """A store with no snapshot sink."""
    return ProjectStore()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove ROADMATE_* variables that might leak in from the shell."""
    from roadmate.core.config import ENV_KEYS

    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def isolated_config(clean_env, tmp_path, monkeypatch):
    """
    Point XDG config/data homes at a temp dir and reset the config cache.

    Yields the temp root.
    """
    from roadmate.core.config import clear_cache

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)
    clear_cache()
    yield tmp_path
    clear_cache()
