"""Utility modules for beadboard."""

from .project import (
    BEADS_DIR_NAME,
    DATA_SOURCE_FILES,
    find_beads_dir,
    get_beads_dir,
    get_data_source,
)

__all__ = [
    "BEADS_DIR_NAME",
    "DATA_SOURCE_FILES",
    "find_beads_dir",
    "get_beads_dir",
    "get_data_source",
]
