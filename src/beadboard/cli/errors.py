"""
Standardized error handling and exit codes for the beadboard CLI.
"""

from enum import IntEnum

from rich.console import Console

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for beadboard CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Missing beads data, failed mutation, or unknown issue."""

    USER_ERROR = 2
    """Invalid command-line input."""

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
    """
    console.print(f"[red]Error:[/red] {problem}", highlight=False)

    if reason:
        console.print(f"[dim]{reason}[/dim]", highlight=False)

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}", highlight=False)


def print_beads_not_found_error(message: str) -> None:
    """Print error when no beads data source can be located."""
    print_error(
        message,
        reason="beadboard reads .beads/beads.db or .beads/issues.jsonl",
        solution="bd init  # or pass --beads-dir",
    )


def print_issue_not_found_error(issue_id: str) -> None:
    """Print error when an issue ID matches nothing."""
    print_error(
        f"Issue not found: {issue_id}",
        solution="beadboard board  # to see available issues",
    )


def print_mutation_error(message: str) -> None:
    """Print error when a bd update/create fails."""
    print_error(message, reason="No changes were applied to the board")
