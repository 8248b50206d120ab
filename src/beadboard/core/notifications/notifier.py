"""
Dispatch of notification events to registered handlers.
"""

import logging
from collections.abc import Callable, Iterable

from rich.console import Console

from .changes import NotificationEvent, NotificationKind, StatusChange, classify_change

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[NotificationEvent], None]


class ChangeNotifier:
    """
    Turn status changes into notification events and fan them out.

    A handler that raises is logged and skipped; the remaining handlers
    still receive the event.

    Example:
        >>> notifier = ChangeNotifier()
        >>> notifier.add_handler(lambda event: print(event.message))
        >>> notifier.dispatch(changes)
    """

    def __init__(self, handlers: Iterable[NotificationHandler] | None = None):
        self._handlers: list[NotificationHandler] = list(handlers or [])

    def add_handler(self, handler: NotificationHandler) -> None:
        """Register a handler for future events."""
        self._handlers.append(handler)

    def remove_handler(self, handler: NotificationHandler) -> None:
        """Unregister a handler (no-op if it was never registered)."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def dispatch(self, changes: Iterable[StatusChange]) -> list[NotificationEvent]:
        """
        Classify each change and deliver resulting events.

        Args:
            changes: Status changes from one reload

        Returns:
            The events that were emitted, in change order
        """
        events: list[NotificationEvent] = []
        for change in changes:
            event = classify_change(change)
            if event is None:
                continue
            events.append(event)
            for handler in list(self._handlers):
                try:
                    handler(event)
                except Exception as e:
                    logger.warning(f"Notification handler failed for {event.issue.id}: {e}")
        return events


class TerminalNotifier:
    """Handler that rings the terminal bell and logs each event."""

    def __init__(self, console: Console | None = None, bell: bool = True):
        self.console = console or Console(stderr=True)
        self.bell = bell

    def __call__(self, event: NotificationEvent) -> None:
        if self.bell and event.kind == NotificationKind.COMPLETED:
            self.console.bell()
        logger.info(f"{event.title}: {event.message}")
