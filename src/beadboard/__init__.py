"""
Beadboard - live board views over a beads issue database.

Projects the issues and dependency edges in a `.beads/` directory into
status buckets, parent/child trees and dependency levels, and keeps board
navigation stable as the underlying data changes.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from beadboard.core.issues.models import Dataset, Issue, IssueStatus

__all__ = ["Dataset", "Issue", "IssueStatus", "__version__"]
