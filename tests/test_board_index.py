"""
Tests for board ordering.

Covers column contiguity after insert/move/reorder/delete, the stale-move
guard and the end-to-end board scenario.
"""

import random

import pytest

from roadmate.core.board import BoardIndex, column_of
from roadmate.core.projects.models import TaskItem, TaskStatus


def titles(board: BoardIndex, status: TaskStatus) -> list[str]:
    return [t.title for t in board.column(status)]


def indices(board: BoardIndex, status: TaskStatus) -> list[int]:
    return [t.sort_index for t in board.column(status)]


@pytest.fixture
def board(sample_project):
    return BoardIndex(sample_project)


@pytest.fixture
def abc_board(board, make_task):
    """Board with A, B, C in Backlog."""
    for task_id in ["a", "b", "c"]:
        board.insert(make_task(task_id))
    return board


class TestInsert:
    """Tests for appending tasks."""

    def test_appends_with_next_index(self, abc_board):
        assert titles(abc_board, TaskStatus.BACKLOG) == ["A", "B", "C"]
        assert indices(abc_board, TaskStatus.BACKLOG) == [0, 1, 2]

    def test_columns_are_independent(self, abc_board, make_task):
        task = abc_board.insert(make_task("d", TaskStatus.DONE))
        assert task.sort_index == 0
        assert indices(abc_board, TaskStatus.BACKLOG) == [0, 1, 2]

    def test_duplicate_id_is_ignored(self, abc_board, make_task):
        assert abc_board.insert(make_task("a")) is None
        assert len(abc_board.project.tasks) == 3


class TestMoveAcrossColumns:
    """Tests for moving tasks between columns."""

    def test_move_appends_and_closes_gap(self, abc_board):
        assert abc_board.move_task("a", TaskStatus.IN_PROGRESS)
        assert titles(abc_board, TaskStatus.BACKLOG) == ["B", "C"]
        assert indices(abc_board, TaskStatus.BACKLOG) == [0, 1]
        assert titles(abc_board, TaskStatus.IN_PROGRESS) == ["A"]
        assert indices(abc_board, TaskStatus.IN_PROGRESS) == [0]

    def test_move_lands_at_end_of_destination(self, abc_board, make_task):
        abc_board.insert(make_task("x", TaskStatus.DONE))
        abc_board.move_task("b", TaskStatus.DONE)
        assert titles(abc_board, TaskStatus.DONE) == ["X", "B"]
        assert indices(abc_board, TaskStatus.DONE) == [0, 1]

    def test_same_column_is_noop(self, abc_board):
        assert abc_board.move_task("a", TaskStatus.BACKLOG) is False
        assert indices(abc_board, TaskStatus.BACKLOG) == [0, 1, 2]

    def test_stale_from_status_is_noop(self, abc_board):
        """A drop computed against an older board must not corrupt ordering."""
        task = abc_board.project.get_task("a")
        assert abc_board.move_across_columns(task, TaskStatus.DONE, TaskStatus.BLOCKED) is False
        assert task.status == TaskStatus.BACKLOG
        assert abc_board.verify()

    def test_unknown_task(self, abc_board):
        assert abc_board.move_task("zzz", TaskStatus.DONE) is False


class TestReorderWithinColumn:
    """Tests for reordering inside a column."""

    def test_move_last_to_first(self, abc_board):
        assert abc_board.reorder_within_column(TaskStatus.BACKLOG, 2, 0)
        assert titles(abc_board, TaskStatus.BACKLOG) == ["C", "A", "B"]
        assert indices(abc_board, TaskStatus.BACKLOG) == [0, 1, 2]

    def test_target_is_clamped(self, abc_board):
        assert abc_board.reorder_within_column(TaskStatus.BACKLOG, 0, 99)
        assert titles(abc_board, TaskStatus.BACKLOG) == ["B", "C", "A"]

    def test_out_of_range_source_is_noop(self, abc_board):
        assert abc_board.reorder_within_column(TaskStatus.BACKLOG, 5, 0) is False
        assert titles(abc_board, TaskStatus.BACKLOG) == ["A", "B", "C"]

    def test_empty_column(self, abc_board):
        assert abc_board.reorder_within_column(TaskStatus.DONE, 0, 0) is False


class TestRemove:
    """Tests for deleting tasks."""

    def test_remove_middle_closes_gap(self, board, make_task):
        for task_id in ["t0", "t1", "t2"]:
            board.insert(make_task(task_id))
        board.remove_from_column(board.project.get_task("t1"))
        assert titles(board, TaskStatus.BACKLOG) == ["T0", "T2"]
        assert indices(board, TaskStatus.BACKLOG) == [0, 1]

    def test_remove_unknown(self, board):
        assert board.remove_from_column(TaskItem(id="ghost", title="Ghost")) is False


class TestApplyUpdate:
    """Tests for applying edited tasks."""

    def test_copies_editable_fields(self, abc_board):
        edited = abc_board.project.get_task("b").model_copy(
            update={"title": "B2", "details": "more", "difficulty": 4, "sort_index": 99}
        )
        assert abc_board.apply_update(edited)
        stored = abc_board.project.get_task("b")
        assert (stored.title, stored.details, stored.difficulty) == ("B2", "more", 4)
        assert stored.sort_index == 1

    def test_status_change_moves_to_end(self, abc_board, make_task):
        abc_board.insert(make_task("d", TaskStatus.DONE))
        edited = abc_board.project.get_task("a").model_copy(update={"status": TaskStatus.DONE})
        abc_board.apply_update(edited)
        assert titles(abc_board, TaskStatus.DONE) == ["D", "A"]
        assert titles(abc_board, TaskStatus.BACKLOG) == ["B", "C"]
        assert abc_board.verify()


class TestNormalize:
    """Tests for renumbering."""

    def test_normalize_keeps_order(self, board):
        board.project.tasks = [
            TaskItem(id="a", title="A", sort_index=7),
            TaskItem(id="b", title="B", sort_index=3),
        ]
        assert not board.verify()
        board.normalize_all()
        assert titles(board, TaskStatus.BACKLOG) == ["B", "A"]
        assert indices(board, TaskStatus.BACKLOG) == [0, 1]

    def test_column_of_sorts_by_index(self):
        tasks = [TaskItem(id="a", title="A", sort_index=1), TaskItem(id="b", title="B", sort_index=0)]
        assert [t.id for t in column_of(tasks, TaskStatus.BACKLOG)] == ["b", "a"]


def test_columns_stay_contiguous_under_random_edits(board):
    """Any sequence of insert/move/reorder/delete keeps every column 0..n-1."""
    rng = random.Random(42)
    statuses = list(TaskStatus)

    for step in range(300):
        tasks = board.project.tasks
        op = rng.choice(["insert", "move", "reorder", "delete"]) if tasks else "insert"
        if op == "insert":
            board.insert(TaskItem(id=f"t{step}", title=f"T{step}", status=rng.choice(statuses)))
        elif op == "move":
            board.move_task(rng.choice(tasks).id, rng.choice(statuses))
        elif op == "reorder":
            status = rng.choice(statuses)
            size = len(board.column(status))
            board.reorder_within_column(status, rng.randrange(size + 1), rng.randrange(size + 2))
        else:
            board.remove_from_column(rng.choice(tasks))

        assert board.verify(), f"column not contiguous after {op} at step {step}"


def test_board_scenario(sample_project, make_task):
    """Insert A, B, C; move A to In Progress; delete B."""
    board = BoardIndex(sample_project)
    for task_id in ["a", "b", "c"]:
        board.insert(make_task(task_id))

    board.move_task("a", TaskStatus.IN_PROGRESS)
    assert [(t.title, t.sort_index) for t in board.column(TaskStatus.BACKLOG)] == [("B", 0), ("C", 1)]
    assert [(t.title, t.sort_index) for t in board.column(TaskStatus.IN_PROGRESS)] == [("A", 0)]

    board.remove_from_column(sample_project.get_task("b"))
    assert [(t.title, t.sort_index) for t in board.column(TaskStatus.BACKLOG)] == [("C", 0)]
