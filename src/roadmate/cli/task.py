"""
Roadmate CLI - Task commands.

Board edits: add, move, reorder, edit and delete tasks. Only ``add`` talks
to the server; the rest change the local board.
"""

import typer
from rich.console import Console

from roadmate.cli.errors import ExitCode
from roadmate.cli.runtime import (
    parse_status,
    resolve_member,
    resolve_project,
    resolve_task,
    run_with_session,
)
from roadmate.core.projects.models import (
    DEFAULT_DIFFICULTY,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    TaskItem,
    TaskStatus,
)
from roadmate.core.session import SessionContext

console = Console()
app = typer.Typer(help="Manage tasks on a project board")


@app.command()
def add(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    title: str = typer.Argument(..., help="Task title"),
    details: str = typer.Option("", "--details", "-d", help="Task details"),
    status: str = typer.Option("backlog", "--status", "-s", help="Column to add the task to"),
    assignee: str | None = typer.Option(None, "--assignee", "-a", help="Member username"),
    difficulty: int = typer.Option(
        DEFAULT_DIFFICULTY,
        "--difficulty",
        help="Difficulty 1-5 (clamped)",
    ),
) -> None:
    """
    Add a task at the end of a column.

    Examples:
        roadmate task add Alpha "Write docs"
        roadmate task add Alpha "Fix login" --status in-progress --assignee bob
    """
    column = parse_status(status)

    async def _add(session: SessionContext) -> TaskItem:
        project = resolve_project(session, project_ref)
        assignee_id = resolve_member(project, assignee).id if assignee else None
        return await session.sync.add_task(
            project.id,
            title,
            details=details,
            status=column,
            assignee_id=assignee_id,
            difficulty=difficulty,
        )

    task = run_with_session(ctx, _add)
    console.print(f"[green]Created:[/green] {task.id}")
    console.print(f"  {task.status.title} #{task.sort_index}: {task.title}")


@app.command()
def move(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    task_id: str = typer.Argument(..., help="Task id"),
    status: str = typer.Argument(..., help="Destination column"),
) -> None:
    """
    Move a task to the end of another column.

    Examples:
        roadmate task move Alpha 3f2c... done
    """
    to_status = parse_status(status)

    async def _move(session: SessionContext) -> bool:
        project = resolve_project(session, project_ref)
        task = resolve_task(project, task_id)
        return session.sync.move_task(project.id, task.id, to_status)

    if not run_with_session(ctx, _move):
        console.print(f"[yellow]Task already in {to_status.title}[/yellow]")
        return
    console.print(f"[green]Moved:[/green] {task_id} → {to_status.title}")


@app.command()
def reorder(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    status: str = typer.Argument(..., help="Column to reorder"),
    from_position: int = typer.Argument(..., help="Current position (0-based)"),
    to_position: int = typer.Argument(..., help="New position (0-based)"),
) -> None:
    """
    Move a task within its column.

    Examples:
        roadmate task reorder Alpha backlog 2 0
    """
    column = parse_status(status)

    async def _reorder(session: SessionContext) -> bool:
        project = resolve_project(session, project_ref)
        return session.sync.reorder_tasks(project.id, column, from_position, to_position)

    if not run_with_session(ctx, _reorder):
        console.print(f"[yellow]No task at position {from_position} in {column.title}[/yellow]")
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print(f"[green]Reordered:[/green] {column.title} {from_position} → {to_position}")


@app.command()
def edit(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    task_id: str = typer.Argument(..., help="Task id"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
    details: str | None = typer.Option(None, "--details", "-d", help="New details"),
    status: str | None = typer.Option(None, "--status", "-s", help="New column"),
    assignee: str | None = typer.Option(
        None,
        "--assignee",
        "-a",
        help="Member username ('' to unassign)",
    ),
    difficulty: int | None = typer.Option(None, "--difficulty", help="New difficulty 1-5"),
) -> None:
    """
    Edit a task. Changing the status moves it to the end of that column.

    Examples:
        roadmate task edit Alpha 3f2c... --title "Write better docs"
        roadmate task edit Alpha 3f2c... --assignee ""
    """
    new_status: TaskStatus | None = parse_status(status) if status is not None else None

    async def _edit(session: SessionContext) -> TaskItem | None:
        project = resolve_project(session, project_ref)
        task = resolve_task(project, task_id)

        update: dict[str, object] = {}
        if title is not None:
            update["title"] = title.strip()
        if details is not None:
            update["details"] = details.strip()
        if new_status is not None:
            update["status"] = new_status
        if assignee is not None:
            update["assignee_id"] = resolve_member(project, assignee).id if assignee else None
        if difficulty is not None:
            update["difficulty"] = max(MIN_DIFFICULTY, min(difficulty, MAX_DIFFICULTY))

        edited = task.model_copy(update=update)
        if not session.sync.update_task(project.id, edited):
            return None
        return project.get_task(task.id)

    task = run_with_session(ctx, _edit)
    if task is None:
        console.print(f"[yellow]Task {task_id} was not changed[/yellow]")
        return
    console.print(f"[green]Updated:[/green] {task.title}")


@app.command()
def delete(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    task_id: str = typer.Argument(..., help="Task id"),
) -> None:
    """
    Delete a task; the rest of its column closes the gap.

    Examples:
        roadmate task delete Alpha 3f2c...
    """

    async def _delete(session: SessionContext) -> str:
        project = resolve_project(session, project_ref)
        task = resolve_task(project, task_id)
        session.sync.remove_task(project.id, task.id)
        return task.title

    removed = run_with_session(ctx, _delete)
    console.print(f"[green]Deleted:[/green] {removed}")
