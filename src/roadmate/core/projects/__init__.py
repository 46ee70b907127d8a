"""
Project entity model and membership rules.

Example:
    >>> from roadmate.core.projects import Project, ProjectMember, TaskItem, TaskStatus
    >>> owner = ProjectMember(id="u1", username="alice", role_key="frontend")
    >>> project = Project(id="p1", name="Alpha", members=[owner], owner_member_id="u1")
"""

from roadmate.core.projects.models import (
    LOCAL_ID_PREFIX,
    Project,
    ProjectMember,
    ProjectRole,
    TaskItem,
    TaskStatus,
    is_provisional,
    new_local_id,
)

__all__ = [
    "LOCAL_ID_PREFIX",
    "Project",
    "ProjectMember",
    "ProjectRole",
    "TaskItem",
    "TaskStatus",
    "is_provisional",
    "new_local_id",
]
