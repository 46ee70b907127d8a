"""
Wire models for the Roadmate API.

These mirror the JSON the backend sends and accepts and convert to and
from the entity models in ``roadmate.core.projects``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from roadmate.core.projects.models import Project, ProjectMember, TaskItem, TaskStatus


class ProjectResponse(BaseModel):
    """Project as returned by ``GET/POST /me/projects``."""

    id: str
    name: str
    description: str = ""
    owner_id: str
    members: list[ProjectMember] = Field(default_factory=list)

    @field_validator("members", mode="before")
    @classmethod
    def none_as_empty(cls, v: object) -> object:
        # The backend serialises a project without members as null
        return [] if v is None else v

    def to_project(self) -> Project:
        return Project(
            id=self.id,
            name=self.name,
            description=self.description,
            members=self.members,
            tasks=[],
            owner_member_id=self.owner_id,
        )


class ProjectDetails(BaseModel):
    """Response of ``PUT /me/projects``: only the edited fields."""

    id: str
    name: str
    description: str = ""


class TaskDTO(BaseModel):
    """Task as returned by ``POST /me/projects/{id}/tasks``."""

    id: str
    project_id: str | None = None
    title: str
    details: str = ""
    status: str = TaskStatus.BACKLOG.value
    assignee_id: str | None = None
    assignee_username: str | None = None
    difficulty: int = 2
    sort_index: int = 0
    created_at: str | None = None

    def to_task(self) -> TaskItem:
        created_at = datetime.now(timezone.utc)
        if self.created_at:
            try:
                created_at = datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
            except ValueError:
                pass
        return TaskItem(
            id=self.id,
            title=self.title,
            details=self.details,
            status=TaskStatus.from_str(self.status),
            assignee_id=self.assignee_id or None,
            assignee_username=self.assignee_username,
            difficulty=self.difficulty,
            created_at=created_at,
            sort_index=self.sort_index,
        )


class CreateProjectRequest(BaseModel):
    name: str
    description: str


class EditProjectRequest(BaseModel):
    id: str
    name: str
    description: str


class CreateTaskRequest(BaseModel):
    # No sort_index: the server appends and the local board keeps its own order
    title: str
    details: str
    status: str
    assignee_id: str | None = None
    difficulty: int


class UpdateProfileRequest(BaseModel):
    """Body of ``PUT /me/profile``; blank fields are left unchanged by the server."""

    name: str
    headline: str
    bio: str


class AddSkillRequest(BaseModel):
    name: str
    proficiency: int


class UpdateSkillRequest(BaseModel):
    id: str
    proficiency: int


class AddEducationRequest(BaseModel):
    school: str
    degree: str
    major: str
    startyear: int
    endyear: int


class UpdateEducationRequest(AddEducationRequest):
    id: str
