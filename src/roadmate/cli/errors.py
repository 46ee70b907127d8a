"""
Standardized error handling and exit codes for the roadmate CLI.

Provides consistent error messages with actionable guidance and maps the
core exception hierarchy onto exit codes.
"""

from enum import IntEnum

from rich.console import Console

from roadmate.core.exceptions import NotFound, RoadmateError, ServerError, ValidationError

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for roadmate CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Server or transport failure."""

    USER_ERROR = 2
    """Invalid input or configuration (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Not logged in",
        ...     reason="No username was given",
        ...     solution="export ROADMATE_USERNAME=alice",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_missing_credentials_error(missing: str) -> None:
    """Print error when the username or token is not configured."""
    env_var = f"ROADMATE_{missing.upper()}"
    print_error(
        f"No {missing} given",
        reason="Every command talks to the API as a logged-in user",
        solution=f"roadmate --{missing} ...  # or export {env_var}=...",
    )


def report(error: RoadmateError) -> ExitCode:
    """
    Print a core error and return the exit code the CLI should use.

    Args:
        error: Error raised by the session, store or gateway

    Returns:
        USER_ERROR for validation failures, GENERAL_ERROR otherwise
    """
    if isinstance(error, ValidationError):
        print_error(error.message)
        return ExitCode.USER_ERROR

    if isinstance(error, NotFound):
        print_error(
            f"{error.entity_id} no longer exists on the server",
            reason="It has been removed from the local cache",
            solution="roadmate projects --refresh",
        )
        return ExitCode.GENERAL_ERROR

    if isinstance(error, ServerError):
        if error.code == -1:
            print_error(
                "Could not reach the Roadmate API",
                reason=error.body,
                solution="Check ROADMATE_API_BASE_URL and that the server is running",
            )
        else:
            print_error(f"The server rejected the request ({error.code})", reason=error.body)
        return ExitCode.GENERAL_ERROR

    print_error(error.message)
    return ExitCode.GENERAL_ERROR
