"""
Project, member and task data models for roadmate.

Defines the entity graph cached by the client: a Project owns its members
and its kanban tasks. Tasks carry a per-column ``sort_index``; the ordering
rules themselves live in ``roadmate.core.board``.

Identifiers are opaque strings. Entities created locally before the server
has answered carry a provisional ``local-<uuid>`` id which is swapped for the
canonical id once the round-trip completes.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LOCAL_ID_PREFIX = "local-"

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
DEFAULT_DIFFICULTY = 2


def new_local_id() -> str:
    """Generate a provisional identifier for an entity the server hasn't seen yet."""
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4()}"


def is_provisional(entity_id: str) -> bool:
    """Check whether an id was generated locally rather than assigned by the server."""
    return entity_id.startswith(LOCAL_ID_PREFIX)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Workflow columns of the project board.

    Values match the status strings accepted by the backend.
    """

    BACKLOG = "backlog"
    IN_PROGRESS = "inProgress"
    BLOCKED = "blocked"
    DONE = "done"

    @property
    def title(self) -> str:
        """Column heading."""
        return {
            TaskStatus.BACKLOG: "Backlog",
            TaskStatus.IN_PROGRESS: "In Progress",
            TaskStatus.BLOCKED: "Blocked",
            TaskStatus.DONE: "Done",
        }[self]

    @classmethod
    def from_str(cls, value: str | None) -> TaskStatus:
        """Parse a wire status, falling back to BACKLOG for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return cls.BACKLOG


class ProjectRole(str, Enum):
    """Predefined member roles. Projects may register extra custom roles."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    FULLSTACK = "fullstack"
    PM = "pm"
    QA = "qa"

    @property
    def label(self) -> str:
        return {
            ProjectRole.FRONTEND: "Frontend",
            ProjectRole.BACKEND: "Backend",
            ProjectRole.FULLSTACK: "Full-stack",
            ProjectRole.PM: "Coordinator/PM",
            ProjectRole.QA: "QA",
        }[self]

    @classmethod
    def is_predefined(cls, key: str) -> bool:
        """Case-insensitive check against the predefined role keys."""
        lower = key.lower()
        return any(role.value == lower for role in cls)


class ProjectMember(BaseModel):
    """
    A user participating in a project.

    Example:
        >>> m = ProjectMember(id="u1", username="alice", roleKey="frontend")
        >>> m.display_role
        'Frontend'
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Member (user) id")
    username: str = Field(..., min_length=1, description="Unique within a project")
    role_key: str = Field(
        default=ProjectRole.FRONTEND.value,
        alias="roleKey",
        description="Predefined role key or a custom role registered on the project",
    )

    model_config = ConfigDict(populate_by_name=True)

    @property
    def display_role(self) -> str:
        try:
            return ProjectRole(self.role_key).label
        except ValueError:
            return self.role_key


class TaskItem(BaseModel):
    """
    A kanban task.

    ``sort_index`` is only meaningful within the task's status column: for
    each (project, status) pair the indices form ``0..n-1``.
    """

    id: str = Field(default_factory=new_local_id)
    title: str = Field(..., min_length=1)
    details: str = ""
    status: TaskStatus = TaskStatus.BACKLOG
    assignee_id: str | None = None
    assignee_username: str | None = None
    difficulty: int = DEFAULT_DIFFICULTY
    created_at: datetime = Field(default_factory=_utcnow)
    sort_index: int = 0

    @field_validator("difficulty", mode="before")
    @classmethod
    def clamp_difficulty(cls, v: int | str | None) -> int:
        """Clamp difficulty into [1, 5]; missing values get the default."""
        if v is None or v == "":
            return DEFAULT_DIFFICULTY
        return max(MIN_DIFFICULTY, min(int(v), MAX_DIFFICULTY))


class Project(BaseModel):
    """
    A project with its members and board.

    Invariants checked on construction:
    - ``owner_member_id`` resolves to one of ``members``
    - member ids and task ids are unique
    """

    id: str = Field(default_factory=new_local_id)
    name: str = Field(..., min_length=1)
    description: str = ""
    members: list[ProjectMember] = Field(default_factory=list)
    tasks: list[TaskItem] = Field(default_factory=list)
    owner_member_id: str
    created_at: datetime = Field(default_factory=_utcnow)
    is_pinned: bool = False
    custom_roles: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_identity(self) -> Project:
        member_ids = [m.id for m in self.members]
        if len(set(member_ids)) != len(member_ids):
            raise ValueError("duplicate member id")
        task_ids = [t.id for t in self.tasks]
        if len(set(task_ids)) != len(task_ids):
            raise ValueError("duplicate task id")
        if self.owner_member_id not in member_ids:
            raise ValueError(f"owner {self.owner_member_id} is not a member of the project")
        return self

    @property
    def owner(self) -> ProjectMember | None:
        return self.get_member(self.owner_member_id)

    def get_member(self, member_id: str) -> ProjectMember | None:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def get_task(self, task_id: str) -> TaskItem | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
