"""
Roadmate CLI - Project commands.

List, create, edit, delete and pin projects, and show a project's board.
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from roadmate.cli.errors import ExitCode
from roadmate.cli.runtime import resolve_project, run_with_session
from roadmate.core.board import BoardIndex
from roadmate.core.projects.models import Project, TaskStatus
from roadmate.core.session import SessionContext

console = Console()


def list_projects(
    ctx: typer.Context,
    refresh: bool = typer.Option(
        False,
        "--refresh",
        "-r",
        help="Fetch the project list from the server (replaces the local cache)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    List your projects, newest first.

    Examples:
        roadmate projects
        roadmate projects --refresh
    """

    async def _list(session: SessionContext) -> list[Project]:
        if refresh:
            return await session.sync.refresh()
        return session.store.projects

    projects = run_with_session(ctx, _list)

    if json_output:
        console.print(json.dumps([p.model_dump(mode="json") for p in projects], indent=2))
        return

    if not projects:
        console.print("[yellow]No projects[/yellow]")
        return

    table = Table(title="Projects")
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Owner")
    table.add_column("Members", justify="right")
    table.add_column("Tasks", justify="right")

    for project in sorted(projects, key=lambda p: not p.is_pinned):
        owner = project.owner
        table.add_row(
            "*" if project.is_pinned else "",
            project.id,
            project.name,
            owner.username if owner else "-",
            str(len(project.members)),
            str(len(project.tasks)),
        )

    console.print(table)


def board(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
) -> None:
    """
    Show a project's board, column by column.

    Examples:
        roadmate board Alpha
    """

    async def _board(session: SessionContext) -> Project:
        return resolve_project(session, project_ref)

    project = run_with_session(ctx, _board)
    index = BoardIndex(project)

    console.print(f"[bold cyan]{project.name}[/bold cyan]")
    if project.description:
        console.print(f"[dim]{project.description}[/dim]")

    table = Table()
    table.add_column("Status")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Assignee")
    table.add_column("Difficulty", justify="right")
    table.add_column("ID", style="dim")

    for status in TaskStatus:
        column = index.column(status)
        if not column:
            table.add_row(status.title, "", "[dim]empty[/dim]", "", "", "")
            continue
        for task in column:
            table.add_row(
                status.title,
                str(task.sort_index),
                task.title,
                task.assignee_username or "-",
                str(task.difficulty),
                task.id,
            )

    console.print(table)


def create_project(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Project name"),
    description: str = typer.Option("", "--description", "-d", help="Project description"),
) -> None:
    """
    Create a project; you become its owner.

    Examples:
        roadmate create-project "Alpha" -d "First project"
    """

    async def _create(session: SessionContext) -> Project:
        return await session.sync.create_project(name, description)

    project = run_with_session(ctx, _create)
    console.print(f"[green]Created:[/green] {project.id}")
    console.print(f"  Name: {project.name}")


def edit_project(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    name: str | None = typer.Option(None, "--name", "-n", help="New name"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
) -> None:
    """
    Rename a project or change its description.

    Examples:
        roadmate edit-project Alpha --name "Alpha v2"
    """
    if name is None and description is None:
        console.print("[yellow]Nothing to change (use --name or --description)[/yellow]")
        raise typer.Exit(ExitCode.USER_ERROR)

    async def _edit(session: SessionContext) -> Project | None:
        project = resolve_project(session, project_ref)
        return await session.sync.edit_project(
            project.id,
            name if name is not None else project.name,
            description if description is not None else project.description,
        )

    project = run_with_session(ctx, _edit)
    if project is not None:
        console.print(f"[green]Updated:[/green] {project.name}")


def delete_project(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """
    Delete a project on the server and locally.

    Examples:
        roadmate delete-project Alpha --yes
    """
    if not yes and not typer.confirm(f"Delete project {project_ref}?"):
        raise typer.Exit(ExitCode.SUCCESS)

    async def _delete(session: SessionContext) -> str:
        project = resolve_project(session, project_ref)
        await session.sync.delete_project(project.id)
        return project.name

    deleted = run_with_session(ctx, _delete)
    console.print(f"[green]Deleted:[/green] {deleted}")


def pin(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    unpin: bool = typer.Option(False, "--unpin", help="Remove the pin instead"),
) -> None:
    """
    Pin a project to the top of the list.

    Examples:
        roadmate pin Alpha
        roadmate pin Alpha --unpin
    """

    async def _pin(session: SessionContext) -> str:
        project = resolve_project(session, project_ref)
        session.sync.set_pinned(project.id, not unpin)
        return project.name

    project_name = run_with_session(ctx, _pin)
    console.print(f"[green]{'Unpinned' if unpin else 'Pinned'}:[/green] {project_name}")
