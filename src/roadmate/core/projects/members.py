"""
Membership and role rules for a project.

These helpers mutate the given Project in place and raise ValidationError
when a precondition fails; nothing here talks to the network. Callers that
own a cached project should work on a copy and commit it through the store.
"""

from __future__ import annotations

import logging

from roadmate.core.exceptions import ValidationError
from roadmate.core.projects.models import Project, ProjectMember, ProjectRole

logger = logging.getLogger(__name__)


def is_known_role(project: Project, role_key: str) -> bool:
    """Check a role key against the predefined roles and the project's custom roles."""
    if ProjectRole.is_predefined(role_key):
        return True
    lower = role_key.lower()
    return any(role.lower() == lower for role in project.custom_roles)


def _require_role(project: Project, role_key: str) -> None:
    if not is_known_role(project, role_key):
        raise ValidationError(f"Unknown role: {role_key}", field="role_key")


def add_member(project: Project, username: str, role_key: str) -> ProjectMember:
    """
    Add a member to the project.

    Args:
        project: Project to modify
        username: Username (trimmed; must be unique case-insensitively)
        role_key: Predefined role key or a registered custom role

    Returns:
        The newly created member

    Raises:
        ValidationError: If the username is blank or taken, or the role is unknown
    """
    trimmed = username.strip()
    if not trimmed:
        raise ValidationError("Username cannot be empty", field="username")

    lower = trimmed.lower()
    if any(m.username.lower() == lower for m in project.members):
        raise ValidationError(f"{trimmed} is already a member", field="username")

    _require_role(project, role_key)

    member = ProjectMember(username=trimmed, role_key=role_key)
    project.members.append(member)
    return member


def change_role(project: Project, member_id: str, role_key: str) -> bool:
    """Change a member's role. Unknown members are ignored."""
    _require_role(project, role_key)
    member = project.get_member(member_id)
    if member is None:
        logger.warning(f"Cannot change role: member {member_id} not in project {project.id}")
        return False
    member.role_key = role_key
    return True


def remove_member(project: Project, member_id: str) -> bool:
    """
    Remove a member from the project.

    Tasks assigned to the removed member become unassigned so that every
    assignee keeps pointing at a member of the same project.

    Raises:
        ValidationError: If the member is the project owner
    """
    if member_id == project.owner_member_id:
        raise ValidationError("The project owner cannot be removed", field="member_id")

    before = len(project.members)
    project.members = [m for m in project.members if m.id != member_id]
    if len(project.members) == before:
        return False

    for task in project.tasks:
        if task.assignee_id == member_id:
            task.assignee_id = None
            task.assignee_username = None
    return True


def add_custom_role(project: Project, role: str) -> str:
    """
    Register a custom role on the project.

    The list stays sorted case-insensitively.

    Raises:
        ValidationError: If the role is blank, collides with a predefined
            role, or is already registered (case-insensitive)
    """
    trimmed = role.strip()
    if not trimmed:
        raise ValidationError("Role name cannot be empty", field="role")
    if ProjectRole.is_predefined(trimmed):
        raise ValidationError(f"{trimmed} is a predefined role", field="role")

    lower = trimmed.lower()
    if any(r.lower() == lower for r in project.custom_roles):
        raise ValidationError(f"Role {trimmed} already exists", field="role")

    project.custom_roles.append(trimmed)
    project.custom_roles.sort(key=str.lower)
    return trimmed


def role_options(project: Project) -> list[tuple[str, str]]:
    """Return (key, label) pairs: predefined roles first, then custom roles."""
    options = [(role.value, role.label) for role in ProjectRole]
    options.extend((role, role) for role in project.custom_roles)
    return options


def sorted_members(
    project: Project,
    role_filter: str | None = None,
    query: str = "",
) -> list[ProjectMember]:
    """
    List members for display: owner first, then by username.

    Args:
        project: Project whose members to list
        role_filter: Only keep members with this role key
        query: Case-insensitive substring matched against username and role label
    """
    members = list(project.members)

    if role_filter is not None:
        members = [m for m in members if m.role_key == role_filter]

    q = query.strip().lower()
    if q:
        members = [
            m for m in members if q in m.username.lower() or q in m.display_role.lower()
        ]

    members.sort(key=lambda m: (m.id != project.owner_member_id, m.username.lower()))
    return members
