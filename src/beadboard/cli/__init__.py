"""
Beadboard CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

from pathlib import Path

import typer
from rich.console import Console

from beadboard import __version__
from beadboard.cli import board, issue, sort
from beadboard.cli.context import setup_logging

# Help panel names for command grouping
PANEL_VIEWS = "Views"
PANEL_ISSUES = "Work with Issues"

# Create the main Typer app
app = typer.Typer(
    name="beadboard",
    help="Live kanban board for beads issue trackers",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    beads_dir: Path | None = typer.Option(
        None,
        "--beads-dir",
        help="Path to the .beads directory (searched upward from cwd by default)",
    ),
) -> None:
    """
    Beadboard - a live view over a beads issue database.

    Quick Start:
        beadboard board              # Kanban snapshot
        beadboard board --watch      # Live board
        beadboard tree               # Parent/child tree
        beadboard show bd-12         # One issue
    """
    setup_logging(debug)

    # Store flags in context for subcommands
    ctx.obj = {"debug": debug, "beads_dir": beads_dir}


# =============================================================================
# Views
# =============================================================================

app.command(name="board", rich_help_panel=PANEL_VIEWS)(board.board)
app.command(name="tree", rich_help_panel=PANEL_VIEWS)(board.tree)
app.command(name="graph", rich_help_panel=PANEL_VIEWS)(board.graph)
app.command(name="stats", rich_help_panel=PANEL_VIEWS)(board.stats)


# =============================================================================
# Work with Issues
# =============================================================================

app.command(name="show", rich_help_panel=PANEL_ISSUES)(issue.show)
app.command(name="update", rich_help_panel=PANEL_ISSUES)(issue.update)
app.command(name="sort", rich_help_panel=PANEL_ISSUES)(sort.sort)


@app.command()
def version() -> None:
    """Show beadboard version and exit."""
    console.print(f"beadboard version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
