"""
Roadmate CLI - Member and role commands.

Membership lives on the local board: members are referenced by username,
roles by key (predefined or registered on the project).
"""

import typer
from rich.console import Console
from rich.table import Table

from roadmate.cli.runtime import resolve_member, resolve_project, run_with_session
from roadmate.core.projects import members as membership
from roadmate.core.projects.models import Project, ProjectMember, ProjectRole
from roadmate.core.session import SessionContext

console = Console()
app = typer.Typer(help="Manage project members")
role_app = typer.Typer(help="Manage project roles")


@app.command(name="list")
def list_members(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    role: str | None = typer.Option(None, "--role", "-r", help="Only members with this role key"),
    search: str = typer.Option("", "--search", "-s", help="Match username or role label"),
) -> None:
    """
    List members: owner first, then alphabetically.

    Examples:
        roadmate member list Alpha
        roadmate member list Alpha --role qa
    """

    async def _list(session: SessionContext) -> tuple[Project, list[ProjectMember]]:
        project = resolve_project(session, project_ref)
        return project, membership.sorted_members(project, role_filter=role, query=search)

    project, members = run_with_session(ctx, _list)
    if not members:
        console.print("[yellow]No matching members[/yellow]")
        return

    table = Table(title=f"{project.name} members")
    table.add_column("Username", style="bold")
    table.add_column("Role")
    table.add_column("")
    for member in members:
        table.add_row(
            member.username,
            member.display_role,
            "owner" if member.id == project.owner_member_id else "",
        )
    console.print(table)


@app.command()
def add(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    username: str = typer.Argument(..., help="Username to add"),
    role: str = typer.Option(ProjectRole.FRONTEND.value, "--role", "-r", help="Role key"),
) -> None:
    """
    Add a member to a project.

    Examples:
        roadmate member add Alpha bob --role backend
    """

    async def _add(session: SessionContext) -> ProjectMember:
        project = resolve_project(session, project_ref)
        return session.sync.add_member(project.id, username, role)

    member = run_with_session(ctx, _add)
    console.print(f"[green]Added:[/green] {member.username} ({member.display_role})")


@app.command(name="role")
def set_role(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    username: str = typer.Argument(..., help="Member username"),
    role: str = typer.Argument(..., help="New role key"),
) -> None:
    """
    Change a member's role.

    Examples:
        roadmate member role Alpha bob qa
    """

    async def _change(session: SessionContext) -> ProjectMember | None:
        project = resolve_project(session, project_ref)
        member = resolve_member(project, username)
        session.sync.change_role(project.id, member.id, role)
        updated = session.store.get(project.id)
        return updated.get_member(member.id) if updated else None

    member = run_with_session(ctx, _change)
    if member is not None:
        console.print(f"[green]Updated:[/green] {member.username} is now {member.display_role}")


@app.command()
def remove(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    username: str = typer.Argument(..., help="Member username"),
) -> None:
    """
    Remove a member; their tasks become unassigned.

    Examples:
        roadmate member remove Alpha bob
    """

    async def _remove(session: SessionContext) -> str:
        project = resolve_project(session, project_ref)
        member = resolve_member(project, username)
        session.sync.remove_member(project.id, member.id)
        return member.username

    removed = run_with_session(ctx, _remove)
    console.print(f"[green]Removed:[/green] {removed}")


@role_app.command(name="add")
def add_role(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
    role: str = typer.Argument(..., help="Custom role name"),
) -> None:
    """
    Register a custom role on a project.

    Examples:
        roadmate role add Alpha Designer
    """

    async def _add(session: SessionContext) -> str:
        project = resolve_project(session, project_ref)
        return session.sync.add_custom_role(project.id, role)

    added = run_with_session(ctx, _add)
    console.print(f"[green]Added role:[/green] {added}")


@role_app.command(name="list")
def list_roles(
    ctx: typer.Context,
    project_ref: str = typer.Argument(..., help="Project id or name"),
) -> None:
    """
    List the roles members of a project can have.

    Examples:
        roadmate role list Alpha
    """

    async def _list(session: SessionContext) -> list[tuple[str, str]]:
        return membership.role_options(resolve_project(session, project_ref))

    for key, label in run_with_session(ctx, _list):
        console.print(f"{key:<12} {label}")
