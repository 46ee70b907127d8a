"""
Roadmate CLI - Profile commands.

Show and edit your profile, skills and education. Changes are sent to the
server first and show up locally once it confirms them.
"""

import typer
from rich.console import Console
from rich.table import Table

from roadmate.cli.errors import ExitCode
from roadmate.cli.runtime import run_with_session
from roadmate.core.profiles.models import Education, Skill, UserProfile
from roadmate.core.session import SessionContext

console = Console()
app = typer.Typer(help="Show and edit your profile")
skill_app = typer.Typer(help="Manage the skills on your profile")
education_app = typer.Typer(help="Manage the education on your profile")
app.add_typer(skill_app, name="skill")
app.add_typer(education_app, name="education")


@app.command()
def show(
    ctx: typer.Context,
    refresh: bool = typer.Option(
        False,
        "--refresh",
        "-r",
        help="Fetch the profile from the server first",
    ),
) -> None:
    """
    Show your profile.

    Examples:
        roadmate profile show --refresh
    """

    async def _show(session: SessionContext) -> UserProfile:
        if refresh:
            return await session.profiles.refresh()
        return session.profiles.profile

    profile = run_with_session(ctx, _show)

    console.print(f"[bold]{profile.name or profile.username}[/bold] (@{profile.username})")
    if profile.headline:
        console.print(profile.headline)
    if profile.bio:
        console.print(f"\n{profile.bio}")

    if profile.skills:
        table = Table(title="Skills")
        table.add_column("ID", style="dim")
        table.add_column("Skill", style="bold")
        table.add_column("Proficiency", justify="right")
        for s in profile.skills:
            table.add_row(s.id, s.name, f"{s.proficiency}/10")
        console.print(table)

    if profile.educations:
        table = Table(title="Education")
        table.add_column("ID", style="dim")
        table.add_column("School", style="bold")
        table.add_column("Degree")
        table.add_column("Years")
        for e in profile.educations:
            table.add_row(e.id, e.school, f"{e.degree}, {e.major}", e.years)
        console.print(table)


@app.command()
def edit(
    ctx: typer.Context,
    name: str | None = typer.Option(None, "--name", "-n", help="Display name"),
    headline: str | None = typer.Option(None, "--headline", help="One-line headline"),
    bio: str | None = typer.Option(None, "--bio", help="Longer description"),
) -> None:
    """
    Change your display name, headline or bio.

    Examples:
        roadmate profile edit --headline "Backend engineer"
    """
    if not any(v and v.strip() for v in (name, headline, bio)):
        console.print("[yellow]Nothing to change (use --name, --headline or --bio)[/yellow]")
        raise typer.Exit(ExitCode.USER_ERROR)

    async def _edit(session: SessionContext) -> UserProfile:
        return await session.profiles.update_profile(name or "", headline or "", bio or "")

    profile = run_with_session(ctx, _edit)
    console.print(f"[green]Updated:[/green] {profile.name or profile.username}")


@skill_app.command(name="add")
def add_skill(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name"),
    proficiency: int = typer.Argument(..., help="Proficiency from 1 to 10"),
) -> None:
    """
    Add a skill.

    Examples:
        roadmate profile skill add Go 7
    """

    async def _add(session: SessionContext) -> Skill:
        return await session.profiles.add_skill(name, proficiency)

    skill = run_with_session(ctx, _add)
    console.print(f"[green]Added:[/green] {skill.name} ({skill.proficiency}/10)")


@skill_app.command(name="set")
def set_skill(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Skill id or name"),
    proficiency: int = typer.Argument(..., help="Proficiency from 1 to 10"),
) -> None:
    """
    Change a skill's proficiency.

    Examples:
        roadmate profile skill set Go 8
    """

    async def _set(session: SessionContext) -> Skill:
        skill = session.profiles.find_skill(ref)
        return await session.profiles.set_proficiency(skill.id, proficiency)

    skill = run_with_session(ctx, _set)
    console.print(f"[green]Updated:[/green] {skill.name} ({skill.proficiency}/10)")


@skill_app.command(name="remove")
def remove_skill(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Skill id or name"),
) -> None:
    """
    Remove a skill.

    Examples:
        roadmate profile skill remove Go
    """

    async def _remove(session: SessionContext) -> str:
        skill = session.profiles.find_skill(ref)
        await session.profiles.remove_skill(skill.id)
        return skill.name

    removed = run_with_session(ctx, _remove)
    console.print(f"[green]Removed:[/green] {removed}")


@education_app.command(name="add")
def add_education(
    ctx: typer.Context,
    school: str = typer.Argument(..., help="School"),
    degree: str = typer.Argument(..., help="Degree"),
    major: str = typer.Argument(..., help="Major"),
    start_year: int = typer.Argument(..., help="First year"),
    end_year: int = typer.Argument(..., help="Last year (may equal the first)"),
) -> None:
    """
    Add an education entry.

    Examples:
        roadmate profile education add "MIT" BSc "Computer Science" 2015 2019
    """

    async def _add(session: SessionContext) -> Education:
        return await session.profiles.add_education(school, degree, major, start_year, end_year)

    education = run_with_session(ctx, _add)
    console.print(f"[green]Added:[/green] {education.id} {education.school} ({education.years})")


@education_app.command(name="edit")
def edit_education(
    ctx: typer.Context,
    education_id: str = typer.Argument(..., help="Education id (see 'roadmate profile show')"),
    school: str | None = typer.Option(None, "--school", help="School"),
    degree: str | None = typer.Option(None, "--degree", help="Degree"),
    major: str | None = typer.Option(None, "--major", help="Major"),
    start_year: int | None = typer.Option(None, "--start", help="First year"),
    end_year: int | None = typer.Option(None, "--end", help="Last year"),
) -> None:
    """
    Edit an education entry; options left out keep their value.

    Examples:
        roadmate profile education edit edu-3 --end 2020
    """
    if all(v is None for v in (school, degree, major, start_year, end_year)):
        console.print("[yellow]Nothing to change[/yellow]")
        raise typer.Exit(ExitCode.USER_ERROR)

    async def _edit(session: SessionContext) -> Education:
        return await session.profiles.update_education(
            education_id, school, degree, major, start_year, end_year
        )

    education = run_with_session(ctx, _edit)
    console.print(f"[green]Updated:[/green] {education.school} ({education.years})")


@education_app.command(name="remove")
def remove_education(
    ctx: typer.Context,
    education_id: str = typer.Argument(..., help="Education id"),
) -> None:
    """
    Remove an education entry.

    Examples:
        roadmate profile education remove edu-3
    """

    async def _remove(session: SessionContext) -> None:
        await session.profiles.remove_education(education_id)

    run_with_session(ctx, _remove)
    console.print(f"[green]Removed:[/green] {education_id}")
