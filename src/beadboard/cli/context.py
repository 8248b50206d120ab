"""
Shared setup for CLI commands: logging, data discovery and store wiring.
"""

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console

from beadboard.cli.errors import ExitCode, print_beads_not_found_error
from beadboard.core.board.store import BoardStore
from beadboard.core.config.loader import SortConfigStore, load_config
from beadboard.core.config.models import BoardConfig
from beadboard.core.issues.exceptions import BeadsNotFoundError
from beadboard.core.issues.loader import load_dataset
from beadboard.core.notifications.notifier import ChangeNotifier, TerminalNotifier
from beadboard.utils.project import get_beads_dir


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def resolve_beads_dir(ctx: typer.Context) -> Path:
    """
    The .beads directory for this invocation.

    Uses --beads-dir when given, otherwise searches upward from the
    current directory. Exits with an error message if nothing is found.
    """
    explicit = ctx.obj.get("beads_dir") if ctx.obj else None
    try:
        return Path(explicit) if explicit else get_beads_dir()
    except BeadsNotFoundError as e:
        print_beads_not_found_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)


def open_store(
    ctx: typer.Context,
    console: Console | None = None,
) -> tuple[BoardStore, BoardConfig, Path]:
    """
    Load config and data and build a store wired to sort persistence.

    Returns:
        (store, config, beads_dir)
    """
    beads_dir = resolve_beads_dir(ctx)
    try:
        dataset = load_dataset(beads_dir)
    except BeadsNotFoundError as e:
        print_beads_not_found_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    config = load_config(beads_dir)
    notifier = None
    if config.notifications_enabled:
        notifier = ChangeNotifier([TerminalNotifier(console)])

    store = BoardStore.from_config(
        config,
        dataset=dataset,
        persist_sort=SortConfigStore(beads_dir).save,
        notifier=notifier,
    )
    return store, config, beads_dir
