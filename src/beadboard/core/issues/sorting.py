"""
Sorting and filtering of issue sequences.

Pure functions mapping (issues, criteria, sort spec) to an ordered issue
list. Sorting is keyed by a single field and is stable: ties keep their
input order, which for a freshly loaded bucket is priority desc,
created desc.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .models import Issue, IssueStatus


class SortField(str, Enum):
    """Fields a board column can be sorted by."""

    PRIORITY = "priority"
    CREATED = "created"
    UPDATED = "updated"
    TITLE = "title"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


# Order used when cycling the sort field of a column.
SORT_FIELD_CYCLE: tuple[SortField, ...] = (
    SortField.PRIORITY,
    SortField.CREATED,
    SortField.UPDATED,
    SortField.TITLE,
)


class SortSpec(BaseModel):
    """Sort field and direction for one board column."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sort_by: SortField = Field(default=SortField.PRIORITY, alias="sortBy")
    sort_order: SortOrder = Field(default=SortOrder.DESC, alias="sortOrder")

    def cycled(self) -> SortSpec:
        """Same order, next field in the cycle."""
        index = SORT_FIELD_CYCLE.index(self.sort_by)
        next_field = SORT_FIELD_CYCLE[(index + 1) % len(SORT_FIELD_CYCLE)]
        return self.model_copy(update={"sort_by": next_field})

    def toggled(self) -> SortSpec:
        """Same field, opposite direction."""
        new_order = SortOrder.ASC if self.sort_order == SortOrder.DESC else SortOrder.DESC
        return self.model_copy(update={"sort_order": new_order})

    @property
    def label(self) -> str:
        """Short indicator such as ``priority ↓``."""
        arrow = "↑" if self.sort_order == SortOrder.ASC else "↓"
        return f"{self.sort_by.value} {arrow}"


class IssueFilter(BaseModel):
    """
    Conjunctive filter criteria.

    Unset criteria are no-ops. ``labels`` matches when the issue shares at
    least one label with the filter. ``status`` is compared against the
    effective status, so filtering on ``blocked`` finds open issues with
    open blockers too.
    """

    model_config = ConfigDict(frozen=True)

    assignee: str | None = None
    labels: list[str] = Field(default_factory=list)
    status: IssueStatus | None = None
    priority: int | None = Field(default=None, ge=0, le=4)

    @property
    def is_active(self) -> bool:
        """True when at least one criterion is set."""
        return bool(
            self.assignee or self.labels or self.status is not None or self.priority is not None
        )


def matches_query(issue: Issue, query: str) -> bool:
    """Case-insensitive substring match across title, description and ID."""
    needle = query.strip().lower()
    if not needle:
        return True
    return (
        needle in issue.title.lower()
        or needle in (issue.description or "").lower()
        or needle in issue.id.lower()
    )


def matches_filter(issue: Issue, criteria: IssueFilter) -> bool:
    """Check an issue against every set criterion."""
    if criteria.assignee and issue.assignee != criteria.assignee:
        return False
    if criteria.labels and not set(criteria.labels) & set(issue.labels):
        return False
    if criteria.status is not None and issue.effective_status != criteria.status:
        return False
    if criteria.priority is not None and issue.priority != criteria.priority:
        return False
    return True


def filter_issues(
    issues: Iterable[Issue],
    criteria: IssueFilter | None = None,
    query: str = "",
) -> list[Issue]:
    """
    Return the subsequence of issues that satisfy all criteria.

    Args:
        issues: Issues in their current order
        criteria: Structured filter (None for no filtering)
        query: Free-text search (empty for no search)

    Returns:
        Matching issues, order preserved
    """
    result = list(issues)
    if query.strip():
        result = [issue for issue in result if matches_query(issue, query)]
    if criteria is not None and criteria.is_active:
        result = [issue for issue in result if matches_filter(issue, criteria)]
    return result


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp(value: datetime | None) -> datetime:
    """Comparable timestamp; missing values sort as the earliest instant."""
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _sort_key(sort_by: SortField) -> Callable[[Issue], Any]:
    if sort_by == SortField.PRIORITY:
        return lambda issue: issue.priority
    if sort_by == SortField.CREATED:
        return lambda issue: _timestamp(issue.created_at)
    if sort_by == SortField.UPDATED:
        return lambda issue: _timestamp(issue.updated_at or issue.created_at)
    return lambda issue: (issue.title or "").casefold()


def sort_issues(issues: Iterable[Issue], spec: SortSpec) -> list[Issue]:
    """
    Sort issues by a single field.

    The sort is stable in both directions: ``desc`` reverses each
    comparison rather than the resulting list, so issues that compare
    equal keep their input order whether sorting asc or desc. Sorting an
    already sorted list by the same spec is a no-op.

    Args:
        issues: Issues to sort
        spec: Field and direction

    Returns:
        New sorted list
    """
    return sorted(
        issues,
        key=_sort_key(spec.sort_by),
        reverse=spec.sort_order == SortOrder.DESC,
    )
