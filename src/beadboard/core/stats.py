"""
Summary statistics for the stats view.
"""

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from beadboard.core.issues.models import BUCKETS, Issue, IssueStatus, IssueType

TOP_N = 5
UNASSIGNED = "unassigned"


def _percent(count: int, total: int) -> int:
    """Integer percentage, rounding halves up."""
    if total <= 0:
        return 0
    return int(count * 100 / total + 0.5)


class StatsSummary(BaseModel):
    """Aggregate counts over a set of issues."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    by_status: dict[IssueStatus, int] = Field(default_factory=dict)
    by_priority: dict[int, int] = Field(default_factory=dict)
    by_type: dict[IssueType, int] = Field(default_factory=dict)
    completion_rate: int = Field(default=0, description="Percent of issues closed")
    blocked_rate: int = Field(default=0, description="Percent of issues blocked")
    top_assignees: list[tuple[str, int]] = Field(default_factory=list)
    top_labels: list[tuple[str, int]] = Field(default_factory=list)


def compute_stats(issues: Iterable[Issue]) -> StatsSummary:
    """
    Compute summary statistics.

    Status counts use the effective status. Issues without an assignee
    are counted under "unassigned". Top assignees and labels are ordered
    by count, ties keeping first-seen order.

    Args:
        issues: Issues to summarise

    Returns:
        StatsSummary
    """
    issues = list(issues)
    total = len(issues)

    by_status = {bucket: 0 for bucket in BUCKETS}
    by_priority = {priority: 0 for priority in range(5)}
    by_type = {issue_type: 0 for issue_type in IssueType}
    assignees: Counter[str] = Counter()
    labels: Counter[str] = Counter()

    for issue in issues:
        by_status[issue.effective_status] += 1
        by_priority[issue.priority] += 1
        by_type[issue.issue_type] += 1
        assignees[issue.assignee or UNASSIGNED] += 1
        labels.update(issue.labels)

    return StatsSummary(
        total=total,
        by_status=by_status,
        by_priority=by_priority,
        by_type=by_type,
        completion_rate=_percent(by_status[IssueStatus.CLOSED], total),
        blocked_rate=_percent(by_status[IssueStatus.BLOCKED], total),
        top_assignees=assignees.most_common(TOP_N),
        top_labels=labels.most_common(TOP_N),
    )
