"""
Reconciliation store: the in-memory project cache for one session.

The store holds the client's believed-current projects (newest first). It
applies local optimistic mutations and merges server-confirmed entities
back in, including the swap from a provisional ``local-...`` id to the
canonical id assigned by the server.

Every change schedules a snapshot write; snapshots never block a mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from roadmate.core.board.index import BoardIndex
from roadmate.core.exceptions import ValidationError
from roadmate.core.projects.models import Project, ProjectMember, TaskItem, TaskStatus
from roadmate.core.store.persistence import SnapshotWriter
from roadmate.core.store.sequencer import MutationSequencer, project_key, task_key

logger = logging.getLogger(__name__)


class ProjectStore:
    """
    In-memory cache of projects, tasks and members.

    One instance per logged-in identity; it is created and torn down by
    ``SessionContext`` rather than living as a module-level singleton.

    Example:
        >>> store = ProjectStore()
        >>> store.upsert(project)
        >>> store.move_task(project.id, task.id, TaskStatus.DONE)
        >>> store.board(project.id).column(TaskStatus.DONE)
    """

    def __init__(
        self,
        writer: SnapshotWriter | None = None,
        projects: Iterable[Project] | None = None,
    ) -> None:
        self.projects: list[Project] = list(projects or [])
        self.writer = writer or SnapshotWriter(None)
        self.sequencer = MutationSequencer()

    @classmethod
    def restore(cls, writer: SnapshotWriter) -> ProjectStore:
        """Create a store seeded from the writer's snapshot (empty if there is none)."""
        loaded = writer.load()
        store = cls(writer=writer, projects=loaded)
        if loaded is not None:
            logger.debug(f"Restored {len(loaded)} project(s) from snapshot")
        return store

    def _changed(self) -> None:
        self.writer.schedule(self.projects)

    # -------------------- queries --------------------

    def index_of(self, project_id: str) -> int | None:
        for idx, project in enumerate(self.projects):
            if project.id == project_id:
                return idx
        return None

    def get(self, project_id: str) -> Project | None:
        idx = self.index_of(project_id)
        return None if idx is None else self.projects[idx]

    def board(self, project_id: str) -> BoardIndex | None:
        project = self.get(project_id)
        if project is None:
            logger.warning(f"No board: project {project_id} is not in the store")
            return None
        return BoardIndex(project)

    # -------------------- collection-level --------------------

    def replace_all(self, projects: Iterable[Project]) -> None:
        """
        Replace the whole cache with a server-fetched list.

        Local pending state is discarded and all outstanding sequence numbers
        are invalidated, so responses still in flight will be dropped.
        """
        self.projects = list(projects)
        self.sequencer.reset()
        self._changed()

    def upsert(self, project: Project, replacing: str | None = None) -> int:
        """
        Insert or replace a project.

        Args:
            project: Project to store
            replacing: Provisional id that ``project`` supersedes. If the
                provisional entry is still cached it is replaced in place and
                its sequence tracking moves to the canonical id.

        Returns:
            The position the project now occupies
        """
        idx = self.index_of(project.id)

        if idx is None and replacing is not None and replacing != project.id:
            idx = self.index_of(replacing)
            if idx is not None:
                logger.info(f"Project {replacing} is now known as {project.id}")
                self.sequencer.remap(project_key(replacing), project_key(project.id))

        if idx is None:
            self.projects.insert(0, project)
            idx = 0
        else:
            self.projects[idx] = project

        self._changed()
        return idx

    def delete(self, project_id: str) -> bool:
        before = len(self.projects)
        self.projects = [p for p in self.projects if p.id != project_id]
        self.sequencer.forget(project_key(project_id))
        if len(self.projects) == before:
            return False
        self._changed()
        return True

    # -------------------- field-level --------------------

    def update_members(self, project_id: str, members: list[ProjectMember]) -> bool:
        """
        Replace a project's member list.

        Raises:
            ValidationError: If the new list drops the project owner
        """
        project = self.get(project_id)
        if project is None:
            logger.warning(f"Cannot update members: project {project_id} is not in the store")
            return False
        if not any(m.id == project.owner_member_id for m in members):
            raise ValidationError("The project owner cannot be removed", field="members")

        project.members = list(members)
        self._changed()
        return True

    def update_tasks(self, project_id: str, tasks: list[TaskItem]) -> bool:
        """Replace a project's tasks, renumbering any column that isn't contiguous."""
        project = self.get(project_id)
        if project is None:
            logger.warning(f"Cannot update tasks: project {project_id} is not in the store")
            return False

        project.tasks = list(tasks)
        board = BoardIndex(project)
        if not board.verify():
            board.normalize_all()
        self._changed()
        return True

    def update_details(self, project_id: str, name: str, description: str) -> bool:
        project = self.get(project_id)
        if project is None:
            return False
        project.name = name
        project.description = description
        self._changed()
        return True

    def set_pinned(self, project_id: str, pinned: bool) -> bool:
        project = self.get(project_id)
        if project is None:
            return False
        project.is_pinned = pinned
        self._changed()
        return True

    # -------------------- board --------------------

    def add_task(self, project_id: str, task: TaskItem) -> TaskItem | None:
        board = self.board(project_id)
        if board is None:
            return None
        inserted = board.insert(task)
        if inserted is not None:
            self._changed()
        return inserted

    def move_task(self, project_id: str, task_id: str, to_status: TaskStatus) -> bool:
        board = self.board(project_id)
        if board is None or not board.move_task(task_id, to_status):
            return False
        self.sequencer.begin(task_key(task_id))
        self._changed()
        return True

    def reorder_tasks(
        self,
        project_id: str,
        status: TaskStatus,
        from_position: int,
        to_position: int,
    ) -> bool:
        board = self.board(project_id)
        if board is None or not board.reorder_within_column(status, from_position, to_position):
            return False
        self._changed()
        return True

    def update_task(self, project_id: str, task: TaskItem) -> bool:
        board = self.board(project_id)
        if board is None or not board.apply_update(task):
            return False
        self.sequencer.begin(task_key(task.id))
        self._changed()
        return True

    def remove_task(self, project_id: str, task_id: str) -> bool:
        board = self.board(project_id)
        if board is None:
            return False
        task = board.project.get_task(task_id)
        if task is None:
            logger.warning(f"Cannot remove unknown task {task_id}")
            return False
        board.remove_from_column(task)
        self.sequencer.forget(task_key(task_id))
        self._changed()
        return True

    @staticmethod
    def _assignee_username(project: Project, stored: TaskItem, canonical: TaskItem) -> str | None:
        # The create-task response does not always carry the username
        if canonical.assignee_username or not canonical.assignee_id:
            return canonical.assignee_username
        member = project.get_member(canonical.assignee_id)
        if member is not None:
            return member.username
        if stored.assignee_id == canonical.assignee_id:
            return stored.assignee_username
        return None

    def replace_task(
        self,
        project_id: str,
        task_id: str,
        canonical: TaskItem,
        identity_only: bool = False,
    ) -> bool:
        """
        Swap a cached task for its server-confirmed version.

        The task keeps its local column and slot. With ``identity_only`` only
        the id and creation time are taken from ``canonical``; that is used
        when a newer local edit has superseded the server's copy.
        """
        project = self.get(project_id)
        if project is None:
            logger.warning(f"Cannot reconcile task: project {project_id} is gone")
            return False

        for pos, stored in enumerate(project.tasks):
            if stored.id == task_id:
                break
        else:
            logger.warning(f"Cannot reconcile task {task_id}: no longer on the board")
            return False

        if identity_only:
            merged = stored.model_copy(
                update={"id": canonical.id, "created_at": canonical.created_at}
            )
        else:
            merged = canonical.model_copy(
                update={
                    "status": stored.status,
                    "sort_index": stored.sort_index,
                    "assignee_username": self._assignee_username(project, stored, canonical),
                }
            )

        project.tasks[pos] = merged
        if task_id != canonical.id:
            self.sequencer.remap(task_key(task_id), task_key(canonical.id))
        self._changed()
        return True
