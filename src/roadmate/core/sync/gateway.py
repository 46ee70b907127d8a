"""
Sync gateway: the remote API as seen by the client core.

``SyncGateway`` is the protocol the sync service depends on and
``ProfileGateway`` the one the profile service depends on;
``HttpSyncGateway`` implements both over ``httpx.AsyncClient`` against the
Roadmate backend. Every request carries the session's bearer token.

Error mapping:
- 404 on update/delete      -> NotFound
- any other non-200 status  -> ServerError(status, body)
- transport failure         -> ServerError(-1, message)
- malformed payload         -> ServerError(500, ...)

Requests are never retried; the caller decides what to tell the user.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar, runtime_checkable

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from roadmate.core.exceptions import NotFound, ServerError
from roadmate.core.profiles.models import Education, Skill, UserProfile
from roadmate.core.projects.models import Project, TaskItem, TaskStatus
from roadmate.core.sync.models import (
    AddEducationRequest,
    AddSkillRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    EditProjectRequest,
    ProjectDetails,
    ProjectResponse,
    TaskDTO,
    UpdateEducationRequest,
    UpdateProfileRequest,
    UpdateSkillRequest,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

PROJECTS_PATH = "/me/projects"
PROFILE_PATH = "/me/profile"
SKILLS_PATH = "/me/skills"
EDUCATIONS_PATH = "/me/educations"


@runtime_checkable
class SyncGateway(Protocol):
    """
    Protocol for the remote project API.

    Implementations return canonical entities (server-assigned ids,
    normalised strings) or raise a ``GatewayError``.
    """

    async def fetch_projects(self) -> list[Project]:
        """
        Fetch every project the user is a member of.

        Raises:
            ServerError: On any failure
        """
        ...

    async def create_project(self, name: str, description: str) -> Project:
        """
        Create a project; the server assigns its id and owner membership.

        Raises:
            ServerError: On any failure
        """
        ...

    async def update_project(self, project_id: str, name: str, description: str) -> ProjectDetails:
        """
        Update a project's name and description.

        Raises:
            NotFound: If the project no longer exists
            ServerError: On any other failure
        """
        ...

    async def delete_project(self, project_id: str) -> None:
        """
        Delete a project.

        Raises:
            NotFound: If the project no longer exists
            ServerError: On any other failure
        """
        ...

    async def create_task(
        self,
        project_id: str,
        title: str,
        details: str,
        status: TaskStatus,
        assignee_id: str | None,
        difficulty: int,
    ) -> TaskItem:
        """
        Create a task at the end of its column on the server.

        Raises:
            ServerError: On any failure
        """
        ...


@runtime_checkable
class ProfileGateway(Protocol):
    """
    Protocol for the remote profile API.

    Update and delete calls raise ``NotFound`` when the skill or education
    is gone; everything else fails with ``ServerError``.
    """

    async def fetch_profile(self) -> UserProfile: ...

    async def update_profile(self, name: str, headline: str, bio: str) -> None: ...

    async def add_skill(self, name: str, proficiency: int) -> Skill: ...

    async def update_skill(self, skill_id: str, proficiency: int) -> Skill: ...

    async def delete_skill(self, skill_id: str) -> None: ...

    async def add_education(
        self, school: str, degree: str, major: str, start_year: int, end_year: int
    ) -> Education: ...

    async def update_education(
        self,
        education_id: str,
        school: str,
        degree: str,
        major: str,
        start_year: int,
        end_year: int,
    ) -> Education: ...

    async def delete_education(self, education_id: str) -> None: ...


@runtime_checkable
class ApiGateway(SyncGateway, ProfileGateway, Protocol):
    """The whole API, as one logged-in session uses it."""


class HttpSyncGateway:
    """
    HTTP implementation of SyncGateway and ProfileGateway.

    Example:
        >>> gateway = HttpSyncGateway("http://localhost:8080", token="...")
        >>> projects = await gateway.fetch_projects()
        >>> await gateway.aclose()
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            base_url: API root, e.g. ``http://localhost:8080``
            token: Bearer credential for the logged-in user
            timeout: Request timeout in seconds
            client: Pre-built client (tests inject one with a mock transport)
        """
        self.token = token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        body: BaseModel | None = None,
        entity_id: str | None = None,
    ) -> Any:
        payload = body.model_dump(mode="json") if body is not None else None
        logger.debug(f"{method} {path}")

        try:
            response = await self._client.request(
                method, path, json=payload, headers=self._headers()
            )
        except httpx.RequestError as e:
            raise ServerError(-1, str(e) or type(e).__name__, route=path) from e

        if response.status_code == 404 and entity_id is not None:
            raise NotFound(entity_id, route=path)
        if response.status_code != 200:
            raise ServerError(response.status_code, response.text, route=path)

        try:
            return response.json()
        except ValueError as e:
            raise ServerError(500, f"Invalid JSON from {path}: {e}", route=path) from e

    @staticmethod
    def _parse(model: type[M], data: Any, path: str) -> M:
        try:
            return model.model_validate(data)
        except ModelValidationError as e:
            raise ServerError(500, f"Invalid {model.__name__} payload: {e}", route=path) from e

    @staticmethod
    def _to_project(response: ProjectResponse, path: str) -> Project:
        try:
            return response.to_project()
        except ModelValidationError as e:
            raise ServerError(500, f"Invalid project {response.id}: {e}", route=path) from e

    async def fetch_projects(self) -> list[Project]:
        data = await self._request("GET", PROJECTS_PATH)
        # An empty list comes back wrapped as {"projects": []}
        if isinstance(data, dict):
            data = data.get("projects") or []
        if not isinstance(data, list):
            raise ServerError(500, "Expected a list of projects", route=PROJECTS_PATH)

        return [
            self._to_project(self._parse(ProjectResponse, item, PROJECTS_PATH), PROJECTS_PATH)
            for item in data
        ]

    async def create_project(self, name: str, description: str) -> Project:
        body = CreateProjectRequest(name=name.strip(), description=description.strip())
        data = await self._request("POST", PROJECTS_PATH, body)
        return self._to_project(self._parse(ProjectResponse, data, PROJECTS_PATH), PROJECTS_PATH)

    async def update_project(self, project_id: str, name: str, description: str) -> ProjectDetails:
        body = EditProjectRequest(
            id=project_id.lower(), name=name.strip(), description=description.strip()
        )
        data = await self._request("PUT", PROJECTS_PATH, body, entity_id=project_id)
        return self._parse(ProjectDetails, data, PROJECTS_PATH)

    async def delete_project(self, project_id: str) -> None:
        path = f"{PROJECTS_PATH}/{project_id.lower()}"
        await self._request("DELETE", path, entity_id=project_id)

    async def create_task(
        self,
        project_id: str,
        title: str,
        details: str,
        status: TaskStatus,
        assignee_id: str | None,
        difficulty: int,
    ) -> TaskItem:
        path = f"{PROJECTS_PATH}/{project_id.lower()}/tasks"
        body = CreateTaskRequest(
            title=title.strip(),
            details=details.strip(),
            status=status.value,
            assignee_id=assignee_id.lower() if assignee_id else None,
            difficulty=difficulty,
        )
        data = await self._request("POST", path, body)
        dto = self._parse(TaskDTO, data, path)
        try:
            return dto.to_task()
        except ModelValidationError as e:
            raise ServerError(500, f"Invalid task {dto.id}: {e}", route=path) from e

    # -------------------- profile --------------------

    async def fetch_profile(self) -> UserProfile:
        data = await self._request("GET", PROFILE_PATH)
        profile = self._parse(UserProfile, data, PROFILE_PATH)
        profile.sort_entries()
        return profile

    async def update_profile(self, name: str, headline: str, bio: str) -> None:
        body = UpdateProfileRequest(name=name.strip(), headline=headline.strip(), bio=bio.strip())
        await self._request("PUT", PROFILE_PATH, body)

    async def add_skill(self, name: str, proficiency: int) -> Skill:
        body = AddSkillRequest(name=name.strip(), proficiency=proficiency)
        data = await self._request("POST", SKILLS_PATH, body)
        return self._parse(Skill, data, SKILLS_PATH)

    async def update_skill(self, skill_id: str, proficiency: int) -> Skill:
        body = UpdateSkillRequest(id=skill_id.lower(), proficiency=proficiency)
        data = await self._request("PUT", SKILLS_PATH, body, entity_id=skill_id)
        return self._parse(Skill, data, SKILLS_PATH)

    async def delete_skill(self, skill_id: str) -> None:
        await self._request("DELETE", f"{SKILLS_PATH}/{skill_id.lower()}", entity_id=skill_id)

    async def add_education(
        self, school: str, degree: str, major: str, start_year: int, end_year: int
    ) -> Education:
        body = AddEducationRequest(
            school=school.strip(),
            degree=degree.strip(),
            major=major.strip(),
            startyear=start_year,
            endyear=end_year,
        )
        data = await self._request("POST", EDUCATIONS_PATH, body)
        return self._parse(Education, data, EDUCATIONS_PATH)

    async def update_education(
        self,
        education_id: str,
        school: str,
        degree: str,
        major: str,
        start_year: int,
        end_year: int,
    ) -> Education:
        body = UpdateEducationRequest(
            id=education_id.lower(),
            school=school.strip(),
            degree=degree.strip(),
            major=major.strip(),
            startyear=start_year,
            endyear=end_year,
        )
        data = await self._request("PUT", EDUCATIONS_PATH, body, entity_id=education_id)
        return self._parse(Education, data, EDUCATIONS_PATH)

    async def delete_education(self, education_id: str) -> None:
        path = f"{EDUCATIONS_PATH}/{education_id.lower()}"
        await self._request("DELETE", path, entity_id=education_id)
