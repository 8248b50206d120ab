"""
Beads directory discovery utilities.

This module locates the `.beads/` directory that holds a project's issue
data by searching upward from a start directory, and works out which
backing store inside it should be read.
"""

from pathlib import Path

from beadboard.core.issues.exceptions import BeadsNotFoundError
from beadboard.core.issues.models import DataSource

BEADS_DIR_NAME = ".beads"

# Data files inside .beads/, in order of preference
DATA_SOURCE_FILES: dict[DataSource, str] = {
    DataSource.SQLITE: "beads.db",
    DataSource.JSONL: "issues.jsonl",
}


def get_data_source(beads_dir: Path) -> DataSource | None:
    """
    Determine which data source is available in a .beads directory.

    SQLite (beads.db) is preferred; issues.jsonl is the fallback.

    Args:
        beads_dir: Path to a .beads directory

    Returns:
        The preferred available DataSource, or None if neither file exists
    """
    for source, filename in DATA_SOURCE_FILES.items():
        if (beads_dir / filename).is_file():
            return source
    return None


def find_beads_dir(start: Path | None = None) -> Path | None:
    """
    Find a .beads directory by searching upward from a start directory.

    A candidate only counts if it contains at least one data source, so
    an empty .beads/ in a subdirectory does not hide the real one above.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the .beads directory, or None if not found.

    Example:
        >>> find_beads_dir(Path("/project/deep/nested/dir"))
        PosixPath('/project/.beads')
    """
    if start is None:
        start = Path.cwd()

    current = start.resolve()
    while True:
        candidate = current / BEADS_DIR_NAME
        if candidate.is_dir() and get_data_source(candidate) is not None:
            return candidate
        if current == current.parent:  # Filesystem root
            return None
        current = current.parent


def get_beads_dir(start: Path | None = None) -> Path:
    """
    Get the .beads directory, raising an error if not found.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the .beads directory.

    Raises:
        BeadsNotFoundError: If no .beads directory with data can be found.
    """
    beads_dir = find_beads_dir(start)
    if beads_dir is None:
        start_dir = start.resolve() if start else Path.cwd()
        raise BeadsNotFoundError(
            f"No beads database found from {start_dir}. "
            f"Expected {BEADS_DIR_NAME}/ containing one of: "
            f"{', '.join(DATA_SOURCE_FILES.values())}",
            path=start_dir,
        )
    return beads_dir
