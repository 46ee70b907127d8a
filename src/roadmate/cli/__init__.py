"""
Roadmate CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging

import typer
from rich.console import Console

from roadmate import __version__
from roadmate.cli import member, profile, projects, task
from roadmate.core.config import load_layered_env

# Help panel names for command grouping
PANEL_PROJECTS = "Projects"
PANEL_BOARD = "Board and Members"
PANEL_PROFILE = "Profile"

app = typer.Typer(
    name="roadmate",
    help="Project boards with your team, from the terminal",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"roadmate {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    username: str | None = typer.Option(
        None,
        "--username",
        "-u",
        help="Log in as this user (default: $ROADMATE_USERNAME)",
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        help="API bearer token (default: $ROADMATE_TOKEN)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """
    Roadmate - shared project boards.

    Quick Start:
        export ROADMATE_USERNAME=alice ROADMATE_TOKEN=...
        roadmate projects --refresh
        roadmate create-project "Alpha"
        roadmate task add Alpha "Write docs"
        roadmate board Alpha
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()

    if debug:
        logging.basicConfig(level=logging.DEBUG)

    ctx.obj = {"debug": debug, "username": username, "token": token}


app.command(name="projects", rich_help_panel=PANEL_PROJECTS)(projects.list_projects)
app.command(name="create-project", rich_help_panel=PANEL_PROJECTS)(projects.create_project)
app.command(name="edit-project", rich_help_panel=PANEL_PROJECTS)(projects.edit_project)
app.command(name="delete-project", rich_help_panel=PANEL_PROJECTS)(projects.delete_project)
app.command(name="pin", rich_help_panel=PANEL_PROJECTS)(projects.pin)

app.command(name="board", rich_help_panel=PANEL_BOARD)(projects.board)
app.add_typer(task.app, name="task", rich_help_panel=PANEL_BOARD)
app.add_typer(member.app, name="member", rich_help_panel=PANEL_BOARD)
app.add_typer(member.role_app, name="role", rich_help_panel=PANEL_BOARD)

app.add_typer(profile.app, name="profile", rich_help_panel=PANEL_PROFILE)


def cli_main() -> None:
    """Entry point for the console script."""
    app()


__all__ = ["app", "cli_main"]
