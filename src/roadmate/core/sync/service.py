"""
Sync service: optimistic local mutations reconciled against the server.

Every mutation that must reach the server follows the same pipeline:

1. validate locally (ValidationError, nothing is sent)
2. apply to the store immediately
3. await the gateway (the only suspend point)
4. on success, reconcile the canonical response if no newer local
   mutation has superseded it; on failure, roll back and re-raise

Creates use a provisional ``local-...`` identity which is remapped to the
server's id on success. Deletes are the exception: they are applied only
after the server confirms.

Board operations (move, reorder, edit, delete task) and membership edits
have no API endpoint; they are local mutations persisted via the snapshot.
"""

from __future__ import annotations

import logging

from roadmate.core.exceptions import GatewayError, NotFound, ValidationError
from roadmate.core.projects import members as membership
from roadmate.core.projects.models import (
    DEFAULT_DIFFICULTY,
    Project,
    ProjectMember,
    ProjectRole,
    TaskItem,
    TaskStatus,
    is_provisional,
)
from roadmate.core.store.sequencer import project_key, task_key
from roadmate.core.store.store import ProjectStore
from roadmate.core.sync.gateway import SyncGateway

logger = logging.getLogger(__name__)

# Role the backend gives the creator of a project
CREATOR_ROLE = ProjectRole.FRONTEND.value


class SyncService:
    """
    Orchestrates optimistic mutations between the store and the gateway.

    Example:
        >>> service = SyncService(store, gateway, username="alice")
        >>> await service.refresh()
        >>> project = await service.create_project("Alpha", "First project")
        >>> task = await service.add_task(project.id, "Write docs")
        >>> service.move_task(project.id, task.id, TaskStatus.IN_PROGRESS)
    """

    def __init__(self, store: ProjectStore, gateway: SyncGateway, username: str) -> None:
        self.store = store
        self.gateway = gateway
        self.username = username

    def _require_project(self, project_id: str, synced: bool = False) -> Project:
        project = self.store.get(project_id)
        if project is None:
            raise ValidationError(f"Unknown project: {project_id}", field="project_id")
        if synced and is_provisional(project.id):
            raise ValidationError(
                f"Project {project.name} is still being created", field="project_id"
            )
        return project

    @staticmethod
    def _require_text(value: str, field: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValidationError(f"{field.capitalize()} cannot be empty", field=field)
        return trimmed

    @staticmethod
    def _resolve_assignee(project: Project, assignee_id: str | None) -> ProjectMember | None:
        if not assignee_id:
            return None
        member = project.get_member(assignee_id)
        if member is None:
            raise ValidationError(
                f"Assignee {assignee_id} is not a member of {project.name}", field="assignee_id"
            )
        return member

    # -------------------- projects --------------------

    async def refresh(self) -> list[Project]:
        """Replace the cache with the server's project list."""
        projects = await self.gateway.fetch_projects()
        self.store.replace_all(projects)
        logger.info(f"Fetched {len(projects)} project(s)")
        return self.store.projects

    async def create_project(self, name: str, description: str = "") -> Project:
        """
        Create a project optimistically.

        A provisional project (owned by a provisional member named after the
        session user) appears at the top of the list at once; it is swapped
        for the canonical project when the server answers, keeping its
        position and any tasks, pin state or custom roles added meanwhile.

        Raises:
            ValidationError: If the name is blank
            GatewayError: If the server rejects the request (the provisional
                project is removed again)
        """
        name = self._require_text(name, "name")
        description = description.strip()

        owner = ProjectMember(username=self.username, role_key=CREATOR_ROLE)
        provisional = Project(
            name=name,
            description=description,
            members=[owner],
            owner_member_id=owner.id,
        )
        key = project_key(provisional.id)
        seq = self.store.sequencer.begin(key)
        self.store.upsert(provisional)

        try:
            canonical = await self.gateway.create_project(name, description)
        except GatewayError as e:
            logger.warning(f"Create project {name!r} failed: {e}")
            self.store.delete(provisional.id)
            raise

        current = self.store.get(provisional.id)
        if current is None or not self.store.sequencer.is_current(key, seq):
            logger.info(
                f"Project {canonical.id} created, but its provisional entry is gone; "
                "it will appear on the next refresh"
            )
            return canonical

        merged = canonical.model_copy(
            update={
                "tasks": current.tasks,
                "is_pinned": current.is_pinned,
                "custom_roles": current.custom_roles,
            }
        )
        self.store.upsert(merged, replacing=provisional.id)
        return merged

    async def edit_project(self, project_id: str, name: str, description: str) -> Project | None:
        """
        Rename / redescribe a project optimistically.

        Returns:
            The updated cached project, or None if the server reported it gone

        Raises:
            ValidationError: If the name is blank or the project unknown
            NotFound: If the project was deleted server-side (local copy dropped)
            GatewayError: On other failures (previous values restored)
        """
        project = self._require_project(project_id, synced=True)
        name = self._require_text(name, "name")
        description = description.strip()

        previous = (project.name, project.description)
        key = project_key(project_id)
        seq = self.store.sequencer.begin(key)
        self.store.update_details(project_id, name, description)

        try:
            details = await self.gateway.update_project(project_id, name, description)
        except NotFound:
            logger.info(f"Project {project_id} is already gone; dropping local copy")
            self.store.delete(project_id)
            raise
        except GatewayError:
            if self.store.sequencer.is_current(key, seq):
                self.store.update_details(project_id, *previous)
            raise

        if self.store.sequencer.is_current(key, seq):
            self.store.update_details(project_id, details.name, details.description)
        else:
            logger.info(f"Discarding stale edit response for project {project_id}")
        return self.store.get(project_id)

    async def delete_project(self, project_id: str) -> bool:
        """
        Delete a project once the server confirms.

        Provisional projects never reached the server and are removed locally.

        Raises:
            GatewayError: If the server refuses (the project stays cached)
        """
        project = self.store.get(project_id)
        if project is None:
            return False
        if is_provisional(project_id):
            return self.store.delete(project_id)

        self.store.sequencer.begin(project_key(project_id))
        try:
            await self.gateway.delete_project(project_id)
        except NotFound:
            logger.info(f"Project {project_id} was already deleted on the server")
        return self.store.delete(project_id)

    def set_pinned(self, project_id: str, pinned: bool) -> bool:
        self._require_project(project_id)
        return self.store.set_pinned(project_id, pinned)

    # -------------------- tasks --------------------

    async def add_task(
        self,
        project_id: str,
        title: str,
        details: str = "",
        status: TaskStatus = TaskStatus.BACKLOG,
        assignee_id: str | None = None,
        difficulty: int = DEFAULT_DIFFICULTY,
    ) -> TaskItem:
        """
        Add a task at the end of its column, optimistically.

        The provisional task keeps the slot it was given locally when the
        canonical task replaces it. If it was edited or moved while the
        request was in flight, only the server's id is taken over.

        Raises:
            ValidationError: Blank title, unknown project or assignee
            GatewayError: If the server rejects it (the task is removed again)
        """
        project = self._require_project(project_id, synced=True)
        title = self._require_text(title, "title")
        details = details.strip()
        assignee = self._resolve_assignee(project, assignee_id)

        task = TaskItem(
            title=title,
            details=details,
            status=status,
            assignee_id=assignee.id if assignee else None,
            assignee_username=assignee.username if assignee else None,
            difficulty=difficulty,
        )
        self.store.add_task(project_id, task)
        key = task_key(task.id)
        seq = self.store.sequencer.begin(key)

        try:
            canonical = await self.gateway.create_task(
                project_id, title, details, status, task.assignee_id, task.difficulty
            )
        except GatewayError as e:
            logger.warning(f"Create task {title!r} failed: {e}")
            self.store.remove_task(project_id, task.id)
            raise

        superseded = not self.store.sequencer.is_current(key, seq)
        if superseded:
            logger.info(f"Task {task.id} changed locally while being created; keeping local fields")
        self.store.replace_task(project_id, task.id, canonical, identity_only=superseded)

        reconciled = self.store.get(project_id)
        stored = reconciled.get_task(canonical.id) if reconciled else None
        return stored or canonical

    def move_task(self, project_id: str, task_id: str, to_status: TaskStatus) -> bool:
        """Move a task to the end of another column (drag-and-drop target)."""
        self._require_project(project_id)
        return self.store.move_task(project_id, task_id, to_status)

    def reorder_tasks(
        self,
        project_id: str,
        status: TaskStatus,
        from_position: int,
        to_position: int,
    ) -> bool:
        """Move a task within its column."""
        self._require_project(project_id)
        return self.store.reorder_tasks(project_id, status, from_position, to_position)

    def update_task(self, project_id: str, task: TaskItem) -> bool:
        """Apply an edited task; a status change moves it to the end of the new column."""
        project = self._require_project(project_id)
        title = self._require_text(task.title, "title")
        assignee = self._resolve_assignee(project, task.assignee_id)
        edited = task.model_copy(
            update={
                "title": title,
                "details": task.details.strip(),
                "assignee_username": assignee.username if assignee else None,
            }
        )
        return self.store.update_task(project_id, edited)

    def remove_task(self, project_id: str, task_id: str) -> bool:
        self._require_project(project_id)
        return self.store.remove_task(project_id, task_id)

    # -------------------- members --------------------

    # The create response carries the server's member list, so membership
    # edits wait until a project has its canonical id.

    def add_member(self, project_id: str, username: str, role_key: str) -> ProjectMember:
        draft = self._require_project(project_id, synced=True).model_copy(deep=True)
        member = membership.add_member(draft, username, role_key)
        self.store.update_members(project_id, draft.members)
        return member

    def change_role(self, project_id: str, member_id: str, role_key: str) -> bool:
        draft = self._require_project(project_id, synced=True).model_copy(deep=True)
        if not membership.change_role(draft, member_id, role_key):
            return False
        return self.store.update_members(project_id, draft.members)

    def remove_member(self, project_id: str, member_id: str) -> bool:
        draft = self._require_project(project_id, synced=True).model_copy(deep=True)
        if not membership.remove_member(draft, member_id):
            return False
        self.store.upsert(draft)
        return True

    def add_custom_role(self, project_id: str, role: str) -> str:
        draft = self._require_project(project_id).model_copy(deep=True)
        added = membership.add_custom_role(draft, role)
        self.store.upsert(draft)
        return added
