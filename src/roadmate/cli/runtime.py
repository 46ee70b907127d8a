"""
Session plumbing shared by the CLI commands.

Each command runs inside a short-lived ``SessionContext``: the snapshot is
restored on entry, the command's coroutine runs under ``asyncio.run``, and
pending snapshot writes are flushed on exit. Core errors are reported with
``roadmate.cli.errors`` and turned into exit codes.
"""

import asyncio
import os
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from pydantic import ValidationError as ModelValidationError

from roadmate.cli.errors import ExitCode, print_error, print_missing_credentials_error, report
from roadmate.core.config import TOKEN_ENV, USERNAME_ENV, RoadmateConfig, load_config
from roadmate.core.exceptions import RoadmateError, ValidationError
from roadmate.core.projects.models import Project, ProjectMember, TaskItem, TaskStatus
from roadmate.core.session import SessionContext
from roadmate.core.sync import ApiGateway, HttpSyncGateway

T = TypeVar("T")

_STATUS_ALIASES = {
    "backlog": TaskStatus.BACKLOG,
    "inprogress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "in_progress": TaskStatus.IN_PROGRESS,
    "blocked": TaskStatus.BLOCKED,
    "done": TaskStatus.DONE,
}


def parse_status(value: str) -> TaskStatus:
    """Parse a status argument (``backlog``, ``in-progress``, ``blocked``, ``done``)."""
    status = _STATUS_ALIASES.get(value.strip().lower())
    if status is None:
        choices = ", ".join(["backlog", "in-progress", "blocked", "done"])
        raise typer.BadParameter(f"Unknown status {value!r} (choose from {choices})")
    return status


def build_gateway(config: RoadmateConfig, token: str) -> ApiGateway:
    return HttpSyncGateway(config.api_base_url, token, timeout=config.request_timeout)


def get_credentials(ctx: typer.Context) -> tuple[str, str]:
    """Resolve username and token from the global options or the environment."""
    obj = ctx.obj or {}
    username = obj.get("username") or os.environ.get(USERNAME_ENV, "")
    token = obj.get("token") or os.environ.get(TOKEN_ENV, "")

    if not username.strip():
        print_missing_credentials_error("username")
        raise typer.Exit(ExitCode.USER_ERROR)
    if not token.strip():
        print_missing_credentials_error("token")
        raise typer.Exit(ExitCode.USER_ERROR)
    return username.strip(), token.strip()


def get_config() -> RoadmateConfig:
    try:
        return load_config()
    except ModelValidationError as e:
        print_error(
            "Invalid configuration",
            reason=str(e),
            solution="Fix ~/.config/roadmate/config.json or the ROADMATE_* variables",
        )
        raise typer.Exit(ExitCode.USER_ERROR)


def run_with_session(
    ctx: typer.Context,
    action: Callable[[SessionContext], Awaitable[T]],
) -> T:
    """
    Run ``action`` inside a logged-in session.

    Raises:
        typer.Exit: With the mapped exit code when a core error escapes
    """
    username, token = get_credentials(ctx)
    config = get_config()

    async def _main() -> T:
        session = SessionContext.login(
            username, token, config=config, gateway=build_gateway(config, token)
        )
        async with session:
            return await action(session)

    try:
        return asyncio.run(_main())
    except RoadmateError as e:
        raise typer.Exit(report(e))


def resolve_project(session: SessionContext, ref: str) -> Project:
    """Find a cached project by id, or by name (case-insensitive)."""
    project = session.store.get(ref)
    if project is not None:
        return project

    lower = ref.strip().lower()
    matches = [p for p in session.store.projects if p.name.lower() == lower]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ValidationError(f"Several projects are named {ref!r}; use the project id")
    raise ValidationError(f"No project {ref!r} (try 'roadmate projects --refresh')")


def resolve_member(project: Project, username: str) -> ProjectMember:
    lower = username.strip().lower()
    for member in project.members:
        if member.username.lower() == lower:
            return member
    raise ValidationError(f"{username} is not a member of {project.name}")


def resolve_task(project: Project, task_id: str) -> TaskItem:
    task = project.get_task(task_id)
    if task is None:
        raise ValidationError(f"No task {task_id} in {project.name}")
    return task
