"""
Beadboard CLI - Sort command.

Change and persist the sort of one board column.
"""

import typer
from rich.console import Console

from beadboard.cli.context import open_store
from beadboard.core.issues.models import IssueStatus
from beadboard.core.issues.sorting import SortField, SortOrder, SortSpec

console = Console()


def sort(
    ctx: typer.Context,
    bucket: IssueStatus = typer.Argument(..., help="Column to sort"),
    field: SortField = typer.Argument(SortField.PRIORITY, help="Field to sort by"),
    order: SortOrder = typer.Argument(SortOrder.DESC, help="Sort direction"),
) -> None:
    """
    Set a column's sort and save it to .beads/bdui-config.json.

    Examples:
        beadboard sort open title asc
        beadboard sort closed updated
    """
    store, _, _ = open_store(ctx, console)
    spec = SortSpec(sort_by=field, sort_order=order)
    store.resort(bucket, spec)

    view = store.get_bucket_view(bucket)
    console.print(f"Sorted [bold]{bucket.value}[/bold] by {spec.label} ({len(view.items)} issues)")
    for issue in view.visible_items:
        marker = "▶" if issue.id == view.selected_id else " "
        console.print(f" {marker} P{issue.priority} {issue.id}  {issue.title}", highlight=False)
