"""
Status change detection between two dataset snapshots.

Only issues present in both snapshots are compared, so new and removed
issues never produce a transition.
"""

from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from beadboard.core.issues.models import Issue, IssueStatus


class StatusChange(BaseModel):
    """One issue whose status differs between two snapshots."""

    model_config = ConfigDict(frozen=True)

    issue: Issue
    old_status: IssueStatus
    new_status: IssueStatus


class NotificationKind(str, Enum):
    """Kinds of user-facing notifications."""

    COMPLETED = "completed"
    BLOCKED = "blocked"


class NotificationEvent(BaseModel):
    """A notification derived from a status change."""

    model_config = ConfigDict(frozen=True)

    kind: NotificationKind
    issue: Issue
    blocked_by: list[str] = Field(default_factory=list)

    @property
    def title(self) -> str:
        if self.kind == NotificationKind.COMPLETED:
            return "Task Completed"
        return "Task Blocked"

    @property
    def message(self) -> str:
        text = f"{self.issue.id}: {self.issue.title}"
        if self.blocked_by:
            text += f" (blocked by {', '.join(self.blocked_by)})"
        return text


def detect_status_changes(
    previous: Mapping[str, Issue],
    current: Mapping[str, Issue],
) -> list[StatusChange]:
    """
    Compare the status of every issue present in both snapshots.

    The stored status is compared, not the effective one, so gaining or
    losing a blocker edge alone is not a change.

    Args:
        previous: ID → issue map of the older snapshot
        current: ID → issue map of the newer snapshot

    Returns:
        One StatusChange per differing issue, in ``current`` order
    """
    changes: list[StatusChange] = []
    for issue_id, issue in current.items():
        old = previous.get(issue_id)
        if old is None:
            continue
        if old.status != issue.status:
            changes.append(
                StatusChange(issue=issue, old_status=old.status, new_status=issue.status)
            )
    return changes


def classify_change(change: StatusChange) -> NotificationEvent | None:
    """
    Map a status change to the notification it triggers, if any.

    Moving into ``closed`` is a completion. Moving into ``blocked`` is a
    blocked notification only while the issue still has open blockers.
    """
    if change.new_status == IssueStatus.CLOSED and change.old_status != IssueStatus.CLOSED:
        return NotificationEvent(kind=NotificationKind.COMPLETED, issue=change.issue)

    if change.new_status == IssueStatus.BLOCKED and change.old_status != IssueStatus.BLOCKED:
        if change.issue.blocked_by:
            return NotificationEvent(
                kind=NotificationKind.BLOCKED,
                issue=change.issue,
                blocked_by=list(change.issue.blocked_by),
            )
    return None
