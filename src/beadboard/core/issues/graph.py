"""
Tree and dependency-level builders.

Derives the parent/child forest and the leveled blocker DAG from a
resolved Dataset. Both builders tolerate cycles: the forest uses one
visited set for the whole traversal, and level computation carries an
explicit path set so a back edge contributes level 0 instead of
recursing forever.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import Dataset, Issue


@dataclass
class ForestNode:
    """An issue placed in the parent/child forest."""

    issue: Issue
    depth: int
    children: list[ForestNode] = field(default_factory=list)


@dataclass(frozen=True)
class FlatNode:
    """A forest node flattened for line-by-line display."""

    issue: Issue
    depth: int
    is_last: bool
    prefix: str


def find_roots(dataset: Dataset) -> list[Issue]:
    """Issues with no parent, or whose parent is not in the dataset."""
    return [
        issue
        for issue in dataset.issues
        if issue.parent is None or issue.parent not in dataset.by_id
    ]


def _attach(
    dataset: Dataset,
    issue: Issue,
    depth: int,
    visited: set[str],
) -> ForestNode:
    visited.add(issue.id)
    node = ForestNode(issue=issue, depth=depth)
    for child_id in issue.children:
        child = dataset.by_id.get(child_id)
        if child is None or child_id in visited:
            continue
        node.children.append(_attach(dataset, child, depth + 1, visited))
    return node


def build_forest(dataset: Dataset) -> list[ForestNode]:
    """
    Build the parent/child forest.

    Roots are visited in dataset order and expanded depth-first. The
    visited set spans the whole traversal, so an issue reachable from two
    parents is attached once (first encountered) and cycles terminate.
    Issues that sit only on a parent cycle have no root and are left out.

    Args:
        dataset: Resolved dataset

    Returns:
        Root nodes in dataset order
    """
    visited: set[str] = set()
    roots: list[ForestNode] = []
    for issue in find_roots(dataset):
        if issue.id in visited:
            continue
        roots.append(_attach(dataset, issue, 0, visited))
    return roots


def flatten_forest(roots: list[ForestNode]) -> list[FlatNode]:
    """
    Flatten a forest into display rows with box-drawing prefixes.

    The prefix is the indentation drawn before a node's own connector:
    ``"│  "`` under an ancestor with later siblings, ``"   "`` otherwise.
    """
    flat: list[FlatNode] = []

    def _walk(node: ForestNode, prefix: str, is_last: bool) -> None:
        flat.append(FlatNode(issue=node.issue, depth=node.depth, is_last=is_last, prefix=prefix))
        child_prefix = prefix + ("   " if is_last else "│  ")
        for index, child in enumerate(node.children):
            _walk(child, child_prefix, index == len(node.children) - 1)

    for index, root in enumerate(roots):
        _walk(root, "", index == len(roots) - 1)
    return flat


def _level(
    dataset: Dataset,
    issue_id: str,
    memo: dict[str, int],
    path: set[str],
) -> int:
    if issue_id in memo:
        return memo[issue_id]
    if issue_id in path:
        return 0

    issue = dataset.by_id.get(issue_id)
    if issue is None:
        return 0

    path.add(issue_id)
    level = 0
    for blocker_id in issue.blocked_by:
        if blocker_id in dataset.by_id:
            level = max(level, _level(dataset, blocker_id, memo, path) + 1)
    path.discard(issue_id)

    memo[issue_id] = level
    return level


def level_of(
    dataset: Dataset,
    issue_id: str,
    memo: dict[str, int] | None = None,
    path: set[str] | None = None,
) -> int:
    """
    Dependency level of one issue.

    Level 0 means no (known) open blockers; otherwise one more than the
    deepest blocker. ``path`` holds the IDs on the current recursion
    path: meeting one again is a cycle and that branch counts as level 0.
    Every finished issue goes into ``memo``, so each issue and edge is
    visited once per shared memo.

    Args:
        dataset: Resolved dataset
        issue_id: Issue to compute
        memo: Shared cache of finished levels
        path: IDs already being expanded by the caller

    Returns:
        Dependency level (0-based)
    """
    if memo is None:
        memo = {}
    return _level(dataset, issue_id, memo, set() if path is None else path)


def dependency_levels(dataset: Dataset) -> list[list[Issue]]:
    """
    Group related issues by dependency level.

    Only issues with some relationship (parent, child, blocker or
    blockee) are included. Within a level, issues keep dataset order.
    Levels inside a blocker cycle follow visiting order: the edge that
    closes the cycle counts as level 0, so a two-issue cycle lands on levels 1
    and 2 and level 0 stays empty. Empty levels are kept so list index
    equals level.

    Args:
        dataset: Resolved dataset

    Returns:
        List of levels, each a list of issues
    """
    memo: dict[str, int] = {}
    levels: list[list[Issue]] = []
    for issue in dataset.issues:
        if not issue.has_relationships:
            continue
        level = level_of(dataset, issue.id, memo)
        while len(levels) <= level:
            levels.append([])
        levels[level].append(issue)
    return levels
