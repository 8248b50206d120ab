"""
Beadboard CLI - Board and view commands.

Render the kanban board, the parent/child tree, the dependency levels
and the stats view from the current beads data.
"""

import threading

import typer
from rich.console import Console

from beadboard.cli.context import open_store
from beadboard.core.board.state import ViewMode
from beadboard.core.board.store import BoardStore
from beadboard.core.issues.models import Dataset
from beadboard.core.issues.sorting import IssueFilter
from beadboard.dashboard.renderer import BoardRenderer
from beadboard.dashboard.watcher import DatasetWatcher

console = Console()


def _renderer(store: BoardStore, column_width: int) -> BoardRenderer:
    store.set_terminal_size(console.width, console.height)
    return BoardRenderer(console=console, column_width=column_width)


def board(
    ctx: typer.Context,
    watch: bool = typer.Option(
        False,
        "--watch",
        "-w",
        help="Keep the board open and refresh when the beads data changes",
    ),
    search: str = typer.Option(
        "",
        "--search",
        "-s",
        help="Only show issues whose title, description or ID contains this text",
    ),
    assignee: str | None = typer.Option(
        None,
        "--assignee",
        "-a",
        help="Only show issues assigned to this user",
    ),
    label: list[str] = typer.Option(
        [],
        "--label",
        "-l",
        help="Only show issues with this label (repeatable)",
    ),
    select: str | None = typer.Option(
        None,
        "--select",
        help="Select the first issue whose ID matches and show its details",
    ),
) -> None:
    """
    Show the kanban board.

    Examples:
        beadboard board                  # One-off snapshot
        beadboard board --watch          # Live board
        beadboard board -s login -l bug  # Filtered board
    """
    store, config, beads_dir = open_store(ctx, console)
    renderer = _renderer(store, config.layout.column_width)

    if search:
        store.set_search_query(search)
    if assignee or label:
        store.set_filter(IssueFilter(assignee=assignee, labels=label))
    if select:
        if store.select_by_id(select):
            store.toggle_details()
        else:
            console.print(f"[yellow]No issue matches '{select}'[/yellow]")

    if not watch:
        console.print(renderer.render(store))
        return

    watcher = DatasetWatcher(
        beads_dir,
        on_reload=store.apply_reload,
        debounce=config.debounce_ms / 1000,
        poll_interval=config.poll_interval,
    )
    stop = threading.Event()

    console.print("[dim]Watching for changes. Press Ctrl+C to exit[/dim]\n")
    with renderer.start_live(store) as live:

        def refresh(_dataset: Dataset) -> None:
            live.update(renderer.render(store))

        watcher.subscribe(refresh)
        try:
            watcher.run(stop)
        except KeyboardInterrupt:
            stop.set()


def _show_view(ctx: typer.Context, mode: ViewMode) -> None:
    store, config, _ = open_store(ctx, console)
    renderer = _renderer(store, config.layout.column_width)
    store.set_view_mode(mode)
    console.print(renderer.render(store))


def tree(ctx: typer.Context) -> None:
    """Show issues as a parent/child tree."""
    _show_view(ctx, ViewMode.TREE)


def graph(ctx: typer.Context) -> None:
    """Show blocking dependencies grouped by level."""
    _show_view(ctx, ViewMode.GRAPH)


def stats(ctx: typer.Context) -> None:
    """Show summary statistics."""
    _show_view(ctx, ViewMode.STATS)
