"""
Board index: per-column ordering of a project's tasks.

A column is the set of tasks sharing one status, ordered by ``sort_index``.
Every mutation here leaves each column numbered ``0..n-1`` with no gaps or
duplicates. Positions passed in by callers are 0-based offsets into the
column, not raw ``sort_index`` values.

Operations on a task that isn't part of the project are logged no-ops: the
board may be working from a stale snapshot while a deletion is arriving
from the network.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from roadmate.core.projects.models import Project, TaskItem, TaskStatus

logger = logging.getLogger(__name__)


def column_of(tasks: Iterable[TaskItem], status: TaskStatus) -> list[TaskItem]:
    """
    Return the tasks of one column ordered by ``sort_index``.

    Pure; ties keep their original relative order.
    """
    return sorted((t for t in tasks if t.status == status), key=lambda t: t.sort_index)


def _renumber(column: list[TaskItem]) -> None:
    for position, task in enumerate(column):
        task.sort_index = position


class BoardIndex:
    """
    Ordering authority for one project's board.

    Mutates ``project.tasks`` in place.

    Example:
        >>> board = BoardIndex(project)
        >>> board.insert(TaskItem(title="Write docs"))
        >>> board.move_task(task_id, TaskStatus.IN_PROGRESS)
        >>> [t.title for t in board.column(TaskStatus.BACKLOG)]
    """

    def __init__(self, project: Project) -> None:
        self.project = project

    def column(self, status: TaskStatus) -> list[TaskItem]:
        return column_of(self.project.tasks, status)

    def columns(self) -> dict[TaskStatus, list[TaskItem]]:
        """All columns in workflow order."""
        return {status: self.column(status) for status in TaskStatus}

    def _resolve(self, task: TaskItem) -> TaskItem | None:
        stored = self.project.get_task(task.id)
        if stored is None:
            logger.warning(f"Task {task.id} is not on the board of project {self.project.id}")
        return stored

    # -------------------- queries --------------------

    def append_to_column(self, task: TaskItem, status: TaskStatus) -> int:
        """Return the sort index that places ``task`` at the end of ``status``."""
        return sum(1 for t in self.project.tasks if t.status == status and t.id != task.id)

    def is_contiguous(self, status: TaskStatus) -> bool:
        indices = [t.sort_index for t in self.column(status)]
        return indices == list(range(len(indices)))

    def verify(self) -> bool:
        """Check the ordering invariant on every column."""
        return all(self.is_contiguous(status) for status in TaskStatus)

    # -------------------- mutations --------------------

    def normalize(self, status: TaskStatus) -> None:
        """Renumber a column to ``0..n-1`` keeping its current order."""
        _renumber(self.column(status))

    def normalize_all(self) -> None:
        for status in TaskStatus:
            self.normalize(status)

    def insert(self, task: TaskItem) -> TaskItem | None:
        """Append a new task at the end of its status column."""
        if self.project.get_task(task.id) is not None:
            logger.warning(f"Task {task.id} already exists in project {self.project.id}")
            return None
        task.sort_index = self.append_to_column(task, task.status)
        self.project.tasks.append(task)
        return task

    def reorder_within_column(
        self,
        status: TaskStatus,
        from_position: int,
        to_position: int,
    ) -> bool:
        """
        Move the task at ``from_position`` to ``to_position`` within a column.

        ``to_position`` is clamped to the column; the column is renumbered
        afterwards and untouched tasks keep their relative order.

        Returns:
            True if the column changed shape (a same-position move still counts)
        """
        column = self.column(status)
        if not 0 <= from_position < len(column):
            logger.warning(
                f"No task at position {from_position} in {status.value} "
                f"(column has {len(column)})"
            )
            return False

        to_position = max(0, min(to_position, len(column) - 1))
        task = column.pop(from_position)
        column.insert(to_position, task)
        _renumber(column)
        return True

    def move_across_columns(
        self,
        task: TaskItem,
        from_status: TaskStatus,
        to_status: TaskStatus,
    ) -> bool:
        """
        Move a task to the end of another column.

        The destination already ends in a valid slot, so only the source
        column is renumbered to close the gap.
        """
        stored = self._resolve(task)
        if stored is None:
            return False
        if from_status == to_status:
            return False
        if stored.status != from_status:
            logger.warning(
                f"Task {stored.id} is in {stored.status.value}, not {from_status.value}; "
                "ignoring stale move"
            )
            return False

        stored.sort_index = self.append_to_column(stored, to_status)
        stored.status = to_status
        self.normalize(from_status)
        return True

    def move_task(self, task_id: str, to_status: TaskStatus) -> bool:
        """Drop handler: move a task, identified by id, to the end of ``to_status``."""
        stored = self.project.get_task(task_id)
        if stored is None:
            logger.warning(f"Cannot move unknown task {task_id}")
            return False
        return self.move_across_columns(stored, stored.status, to_status)

    def remove_from_column(self, task: TaskItem) -> bool:
        """Delete a task and close the gap it leaves in its column."""
        stored = self._resolve(task)
        if stored is None:
            return False
        self.project.tasks = [t for t in self.project.tasks if t.id != stored.id]
        self.normalize(stored.status)
        return True

    def apply_update(self, task: TaskItem) -> bool:
        """
        Apply an edited copy of a task.

        A changed status moves the task to the end of its new column; the
        other editable fields are copied over. Identity, creation time and
        ordering stay under the board's control.
        """
        stored = self._resolve(task)
        if stored is None:
            return False

        if task.status != stored.status:
            self.move_across_columns(stored, stored.status, task.status)

        stored.title = task.title
        stored.details = task.details
        stored.assignee_id = task.assignee_id
        stored.assignee_username = task.assignee_username
        stored.difficulty = task.difficulty
        self.normalize(stored.status)
        return True
