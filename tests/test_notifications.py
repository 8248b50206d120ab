"""
Tests for status change detection and notification dispatch.
"""

import logging
from unittest.mock import Mock

import pytest

from beadboard.core.issues.models import Issue, IssueStatus
from beadboard.core.notifications import (
    ChangeNotifier,
    NotificationEvent,
    NotificationKind,
    StatusChange,
    TerminalNotifier,
    classify_change,
    detect_status_changes,
)


def snapshot(*issues: Issue) -> dict[str, Issue]:
    return {issue.id: issue for issue in issues}


def change(old: IssueStatus, new: IssueStatus, **fields) -> StatusChange:
    issue = Issue(id="bd-1", title="Task", **fields)
    return StatusChange(issue=issue, old_status=old, new_status=new)


class TestDetectStatusChanges:
    """Tests for detect_status_changes."""

    def test_reports_changed_issues(self):
        previous = snapshot(Issue(id="A"), Issue(id="B"))
        current = snapshot(Issue(id="A", status=IssueStatus.CLOSED), Issue(id="B"))

        changes = detect_status_changes(previous, current)

        assert [(c.issue.id, c.old_status, c.new_status) for c in changes] == [
            ("A", IssueStatus.OPEN, IssueStatus.CLOSED)
        ]

    def test_new_and_removed_issues_ignored(self):
        previous = snapshot(Issue(id="gone"))
        current = snapshot(Issue(id="new", status=IssueStatus.CLOSED))

        assert detect_status_changes(previous, current) == []

    def test_gaining_blocker_is_not_a_change(self):
        """Test only the stored status counts, not the effective one."""
        previous = snapshot(Issue(id="A"), Issue(id="B"))
        current = snapshot(Issue(id="A", blocked_by=["B"]), Issue(id="B", blocks=["A"]))

        assert current["A"].effective_status == IssueStatus.BLOCKED
        assert detect_status_changes(previous, current) == []
        assert ChangeNotifier().dispatch(detect_status_changes(previous, current)) == []

    def test_reports_stored_statuses(self):
        previous = snapshot(Issue(id="A", blocked_by=["B"]))
        current = snapshot(Issue(id="A", status=IssueStatus.BLOCKED, blocked_by=["B"]))

        changes = detect_status_changes(previous, current)

        assert [(c.old_status, c.new_status) for c in changes] == [
            (IssueStatus.OPEN, IssueStatus.BLOCKED)
        ]
        assert classify_change(changes[0]).kind == NotificationKind.BLOCKED

    def test_follows_current_order(self):
        previous = snapshot(Issue(id="A"), Issue(id="B"))
        current = snapshot(
            Issue(id="B", status=IssueStatus.CLOSED), Issue(id="A", status=IssueStatus.CLOSED)
        )

        assert [c.issue.id for c in detect_status_changes(previous, current)] == ["B", "A"]

    def test_unchanged(self, sample_dataset):
        assert detect_status_changes(sample_dataset.snapshot(), sample_dataset.by_id) == []


class TestClassifyChange:
    """Tests for classify_change."""

    @pytest.mark.parametrize(
        "old", [IssueStatus.OPEN, IssueStatus.IN_PROGRESS, IssueStatus.BLOCKED]
    )
    def test_completion(self, old):
        event = classify_change(change(old, IssueStatus.CLOSED, status=IssueStatus.CLOSED))

        assert event.kind == NotificationKind.COMPLETED
        assert event.title == "Task Completed"
        assert event.message == "bd-1: Task"

    def test_became_blocked(self):
        event = classify_change(
            change(IssueStatus.OPEN, IssueStatus.BLOCKED, blocked_by=["bd-7", "bd-8"])
        )

        assert event.kind == NotificationKind.BLOCKED
        assert event.blocked_by == ["bd-7", "bd-8"]
        assert event.title == "Task Blocked"
        assert event.message == "bd-1: Task (blocked by bd-7, bd-8)"

    def test_stored_blocked_without_blockers_is_silent(self):
        assert (
            classify_change(
                change(IssueStatus.IN_PROGRESS, IssueStatus.BLOCKED, status=IssueStatus.BLOCKED)
            )
            is None
        )

    @pytest.mark.parametrize(
        "old,new",
        [
            (IssueStatus.OPEN, IssueStatus.IN_PROGRESS),
            (IssueStatus.BLOCKED, IssueStatus.OPEN),
            (IssueStatus.CLOSED, IssueStatus.OPEN),
        ],
    )
    def test_other_transitions_silent(self, old, new):
        assert classify_change(change(old, new)) is None


class TestChangeNotifier:
    """Tests for ChangeNotifier dispatch."""

    @pytest.fixture
    def changes(self):
        return [
            change(IssueStatus.OPEN, IssueStatus.CLOSED, status=IssueStatus.CLOSED),
            change(IssueStatus.OPEN, IssueStatus.IN_PROGRESS),
        ]

    def test_dispatch_to_all_handlers(self, changes):
        first, second = Mock(), Mock()
        notifier = ChangeNotifier([first])
        notifier.add_handler(second)

        events = notifier.dispatch(changes)

        assert [event.kind for event in events] == [NotificationKind.COMPLETED]
        first.assert_called_once_with(events[0])
        second.assert_called_once_with(events[0])

    def test_failing_handler_is_logged(self, changes, caplog):
        """Test a raising handler does not stop the others."""
        broken = Mock(side_effect=RuntimeError("no display"))
        working = Mock()
        notifier = ChangeNotifier([broken, working])

        with caplog.at_level(logging.WARNING):
            notifier.dispatch(changes)

        working.assert_called_once()
        assert "Notification handler failed for bd-1: no display" in caplog.text

    def test_remove_handler(self, changes):
        handler = Mock()
        notifier = ChangeNotifier([handler])

        notifier.remove_handler(handler)
        notifier.remove_handler(handler)
        notifier.dispatch(changes)

        handler.assert_not_called()

    def test_no_handlers(self, changes):
        assert len(ChangeNotifier().dispatch(changes)) == 1


class TestTerminalNotifier:
    """Tests for the terminal bell handler."""

    def test_bell_on_completion(self, caplog):
        console = Mock()
        notifier = TerminalNotifier(console=console)

        with caplog.at_level(logging.INFO):
            notifier(NotificationEvent(kind=NotificationKind.COMPLETED, issue=Issue(id="bd-1")))

        console.bell.assert_called_once_with()
        assert "Task Completed: bd-1" in caplog.text

    def test_no_bell_when_blocked(self):
        console = Mock()
        notifier = TerminalNotifier(console=console)

        notifier(
            NotificationEvent(
                kind=NotificationKind.BLOCKED, issue=Issue(id="bd-1"), blocked_by=["bd-2"]
            )
        )

        console.bell.assert_not_called()

    def test_bell_disabled(self):
        console = Mock()
        notifier = TerminalNotifier(console=console, bell=False)

        notifier(NotificationEvent(kind=NotificationKind.COMPLETED, issue=Issue(id="bd-1")))

        console.bell.assert_not_called()
