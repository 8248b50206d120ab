"""
Change notification engine.

Detects status transitions between dataset snapshots and dispatches
completion and became-blocked events.
"""

from .changes import (
    NotificationEvent,
    NotificationKind,
    StatusChange,
    classify_change,
    detect_status_changes,
)
from .notifier import ChangeNotifier, NotificationHandler, TerminalNotifier

__all__ = [
    "ChangeNotifier",
    "NotificationEvent",
    "NotificationHandler",
    "NotificationKind",
    "StatusChange",
    "TerminalNotifier",
    "classify_change",
    "detect_status_changes",
]
