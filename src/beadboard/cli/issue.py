"""
Beadboard CLI - Issue commands.

Show a single issue in an export format, and update issues through the
beads CLI.
"""

import typer
from rich.console import Console

from beadboard.cli.context import open_store, resolve_beads_dir
from beadboard.cli.errors import ExitCode, print_issue_not_found_error, print_mutation_error
from beadboard.core.export import ExportFormat, format_issue
from beadboard.core.issues.client import BeadsClient
from beadboard.core.issues.exceptions import MutationError
from beadboard.core.issues.models import IssueStatus

console = Console()


def show(
    ctx: typer.Context,
    issue_id: str = typer.Argument(..., help="Issue ID (or a unique part of it)"),
    fmt: ExportFormat = typer.Option(
        ExportFormat.MARKDOWN,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """
    Print one issue.

    Examples:
        beadboard show bd-12
        beadboard show bd-12 --format json
    """
    store, _, _ = open_store(ctx, console)

    issue = store.dataset.get(issue_id)
    if issue is None and store.select_by_id(issue_id):
        issue = store.get_selected_issue()
    if issue is None:
        print_issue_not_found_error(issue_id)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    console.print(format_issue(issue, fmt), markup=False, highlight=False)


def update(
    ctx: typer.Context,
    issue_id: str = typer.Argument(..., help="Issue ID to update"),
    status: IssueStatus | None = typer.Option(None, "--status", help="New status"),
    priority: int | None = typer.Option(
        None, "--priority", "-p", min=0, max=4, help="New priority (0-4, sorted numerically)"
    ),
    assignee: str | None = typer.Option(None, "--assignee", "-a", help="New assignee"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
) -> None:
    """
    Update an issue with bd.

    The board picks the change up on its next reload.

    Examples:
        beadboard update bd-12 --status in_progress
        beadboard update bd-12 -p 3 -a alice
    """
    beads_dir = resolve_beads_dir(ctx)
    try:
        client = BeadsClient(project_dir=beads_dir.parent)
        client.update_issue(
            issue_id,
            status=status,
            priority=priority,
            assignee=assignee,
            title=title,
        )
    except MutationError as e:
        print_mutation_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    console.print(f"[green]Updated {issue_id}[/green]")
