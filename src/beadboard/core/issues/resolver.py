"""
Dependency resolution for issue snapshots.

Turns a flat list of issues plus typed dependency edges into issues
annotated with parent/children/blocked_by/blocks, then groups them into
effective-status buckets. Resolution is a flat O(n + e) pass; cycles are
left for the graph builders to deal with.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import (
    BUCKETS,
    DataSource,
    Dataset,
    DatasetStats,
    Dependency,
    DependencyType,
    Issue,
    IssueStatus,
)

logger = logging.getLogger(__name__)


def _append_unique(target: list[str], value: str) -> None:
    if value not in target:
        target.append(value)


def resolve_issues(issues: Iterable[Issue], dependencies: Iterable[Dependency]) -> list[Issue]:
    """
    Annotate issues with relational fields derived from dependency edges.

    Any relational fields already present on the input issues are
    discarded, so resolving the same raw data twice gives the same
    result. Input order is preserved and new Issue objects are returned.

    Edge handling:
        * ``parent-child``: the edge target is the parent. The source gets
          ``parent`` set and is appended to the parent's ``children``.
        * ``blocks``: the target blocks the source. The target is appended
          to the source's ``blocked_by`` and the source to the target's
          ``blocks``.
        * Other kinds derive nothing. Edges naming an unknown ID, and
          self-edges, are dropped.

    After all edges are applied, closed blockers are removed from
    ``blocked_by`` (and a closed issue's ``blocks`` is cleared of the
    same pairs), keeping both directions symmetric.

    Args:
        issues: Issues in load order
        dependencies: Typed edges between issues

    Returns:
        Newly built issues with derived fields, in input order
    """
    ordered = list(issues)
    by_id: dict[str, Issue] = {}
    for issue in ordered:
        if issue.id in by_id:
            logger.warning(f"Duplicate issue ID {issue.id}, keeping first occurrence")
            continue
        by_id[issue.id] = issue

    parent: dict[str, str] = {}
    children: dict[str, list[str]] = {issue_id: [] for issue_id in by_id}
    blocked_by: dict[str, list[str]] = {issue_id: [] for issue_id in by_id}
    blocks: dict[str, list[str]] = {issue_id: [] for issue_id in by_id}

    for dep in dependencies:
        source, target = dep.issue_id, dep.depends_on_id
        if source not in by_id or target not in by_id or source == target:
            continue

        if dep.type == DependencyType.PARENT_CHILD:
            # Last parent edge wins for `parent`, but every parent lists the
            # child; the tree builder attaches it only once.
            parent[source] = target
            _append_unique(children[target], source)
        elif dep.type == DependencyType.BLOCKS:
            _append_unique(blocked_by[source], target)
            _append_unique(blocks[target], source)

    # Closure filter runs only after every edge is in place.
    closed = {issue_id for issue_id, issue in by_id.items() if issue.status == IssueStatus.CLOSED}

    resolved: list[Issue] = []
    for issue_id, issue in by_id.items():
        resolved.append(
            issue.model_copy(
                update={
                    "parent": parent.get(issue_id),
                    "children": children[issue_id],
                    "blocked_by": [b for b in blocked_by[issue_id] if b not in closed],
                    "blocks": [] if issue_id in closed else blocks[issue_id],
                }
            )
        )
    return resolved


def group_by_status(issues: Iterable[Issue]) -> dict[IssueStatus, list[Issue]]:
    """Group issues by effective status; all four buckets are present."""
    grouped: dict[IssueStatus, list[Issue]] = {bucket: [] for bucket in BUCKETS}
    for issue in issues:
        grouped[issue.effective_status].append(issue)
    return grouped


def build_dataset(
    issues: Iterable[Issue],
    dependencies: Iterable[Dependency],
    data_source: DataSource | None = None,
) -> Dataset:
    """
    Resolve issues and assemble a complete Dataset snapshot.

    Args:
        issues: Raw issues in load order
        dependencies: Raw dependency edges
        data_source: Where the raw data came from

    Returns:
        A new Dataset with status index, ID map and stats
    """
    edges = list(dependencies)
    resolved = resolve_issues(issues, edges)
    by_status = group_by_status(resolved)

    stats = DatasetStats(
        total=len(resolved),
        **{bucket.value: len(by_status[bucket]) for bucket in BUCKETS},
    )

    logger.debug(
        f"Resolved {stats.total} issues and {len(edges)} edges "
        f"({stats.blocked} blocked, {stats.closed} closed)"
    )

    return Dataset(
        issues=resolved,
        by_status=by_status,
        by_id={issue.id: issue for issue in resolved},
        stats=stats,
        dependencies=edges,
        data_source=data_source,
    )
