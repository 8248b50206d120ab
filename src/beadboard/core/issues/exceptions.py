"""
Exceptions raised by beadboard's loading and mutation layers.

Exception Hierarchy:
    BeadboardError (base)
    ├── BeadsNotFoundError (no .beads data source; fatal at startup)
    ├── IssueParseError (one malformed record; the loader skips it)
    └── MutationError (an external update/create failed)
        └── BeadsNotAvailableError (bd CLI missing)

Dangling or cyclic dependency edges are never errors: the resolver and
the graph builders tolerate them.
"""

from pathlib import Path


class BeadboardError(Exception):
    """Base exception for all beadboard errors."""


class BeadsNotFoundError(BeadboardError):
    """
    Raised when no backing store can be located.

    Attributes:
        path: Directory that was searched or inspected, if known
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class IssueParseError(BeadboardError):
    """
    Raised when a single record in the backing store is malformed.

    The loader catches this per record, logs a warning and continues.

    Attributes:
        line_num: 1-based line number in issues.jsonl, if applicable
    """

    def __init__(self, message: str, line_num: int | None = None) -> None:
        self.line_num = line_num
        if line_num is not None:
            message = f"Line {line_num}: {message}"
        super().__init__(message)


class MutationError(BeadboardError):
    """Raised when an external issue update or create fails."""


class BeadsNotAvailableError(MutationError):
    """Raised when the beads CLI (bd) is not installed."""
