"""
Issue models and the projection engine.

This package holds the Issue/Dataset models, the dependency resolver,
the sort/filter engine, the tree and level builders, the data loader
and the bd mutation client.
"""

from .client import BeadsClient
from .exceptions import (
    BeadboardError,
    BeadsNotAvailableError,
    BeadsNotFoundError,
    IssueParseError,
    MutationError,
)
from .graph import FlatNode, ForestNode, build_forest, dependency_levels, flatten_forest
from .models import (
    BUCKETS,
    Comment,
    DataSource,
    Dataset,
    DatasetStats,
    Dependency,
    DependencyType,
    Issue,
    IssueStatus,
    IssueType,
)
from .resolver import build_dataset, resolve_issues
from .sorting import IssueFilter, SortField, SortOrder, SortSpec, filter_issues, sort_issues

__all__ = [
    # Models
    "BUCKETS",
    "Comment",
    "DataSource",
    "Dataset",
    "DatasetStats",
    "Dependency",
    "DependencyType",
    "Issue",
    "IssueStatus",
    "IssueType",
    # Resolution and projection
    "build_dataset",
    "resolve_issues",
    "IssueFilter",
    "SortField",
    "SortOrder",
    "SortSpec",
    "filter_issues",
    "sort_issues",
    "FlatNode",
    "ForestNode",
    "build_forest",
    "dependency_levels",
    "flatten_forest",
    # Mutation
    "BeadsClient",
    # Errors
    "BeadboardError",
    "BeadsNotAvailableError",
    "BeadsNotFoundError",
    "IssueParseError",
    "MutationError",
]
