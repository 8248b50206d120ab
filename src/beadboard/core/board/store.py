"""
Board store: the view/navigation state machine.

Holds the current Dataset together with per-column selection and scroll
state, and reconciles that state whenever the dataset, the sort config or
the active filters change. Selection is tracked by issue ID, never by
index, so it survives reloads and re-sorts as long as the issue stays in
its column.

All state changes go through the named transition methods below. The
render layer only reads (get_bucket_view, get_selected_issue, ...).
"""

import logging
from collections.abc import Callable

from beadboard.core.config.models import BoardConfig, LayoutConfig, SortConfig
from beadboard.core.issues.graph import ForestNode, build_forest, dependency_levels
from beadboard.core.issues.models import BUCKETS, Dataset, Issue, IssueStatus
from beadboard.core.issues.sorting import IssueFilter, SortSpec, filter_issues, sort_issues
from beadboard.core.notifications.changes import StatusChange, detect_status_changes
from beadboard.core.notifications.notifier import ChangeNotifier
from beadboard.core.stats import StatsSummary, compute_stats

from .state import (
    BucketView,
    ColumnState,
    ConfirmRequest,
    Overlay,
    ViewMode,
    page_of,
    total_pages,
)

logger = logging.getLogger(__name__)

SortPersistHook = Callable[[SortConfig], object]

DEFAULT_PAGE_SIZE = 10


def _index_of(items: list[Issue], issue_id: str | None) -> int | None:
    if issue_id is None:
        return None
    for index, issue in enumerate(items):
        if issue.id == issue_id:
            return index
    return None


class BoardStore:
    """
    Explicit state object for the kanban board and its secondary views.

    Example:
        >>> store = BoardStore(dataset)
        >>> store.move_down()
        >>> store.get_selected_issue().id
        'bd-2'
        >>> store.resort(IssueStatus.OPEN, SortSpec(sort_by=SortField.TITLE))
    """

    def __init__(
        self,
        dataset: Dataset | None = None,
        sort_config: SortConfig | None = None,
        layout: LayoutConfig | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        notifications_enabled: bool = True,
        persist_sort: SortPersistHook | None = None,
        notifier: ChangeNotifier | None = None,
    ):
        """
        Initialize the store.

        Args:
            dataset: Initial dataset (empty if None)
            sort_config: Per-column sort settings (defaults if None)
            layout: Layout constants used by set_terminal_size
            page_size: Items per page until the terminal size is known
            notifications_enabled: Whether reloads run change detection
            persist_sort: Called with the new SortConfig after every re-sort
            notifier: Receives status changes detected on reload
        """
        self.sort_config = sort_config or SortConfig()
        self.layout = layout or LayoutConfig()
        self.page_size = max(page_size, 1)
        self.notifications_enabled = notifications_enabled
        self.persist_sort = persist_sort
        self.notifier = notifier

        self.selected_column = 0
        self.filter = IssueFilter()
        self.search_query = ""
        self.active_overlay = Overlay.NONE
        self.show_details = False
        self.view_mode = ViewMode.KANBAN
        self.previous_view = ViewMode.KANBAN
        self.editing_issue_id: str | None = None
        self.pending_confirm: ConfirmRequest | None = None
        self.terminal_width: int | None = None
        self.terminal_height: int | None = None

        self._dataset = Dataset.empty()
        self._previous_snapshot: dict[str, Issue] | None = None
        self._columns: dict[IssueStatus, ColumnState] = {
            bucket: ColumnState() for bucket in BUCKETS
        }

        if dataset is not None:
            self.apply_reload(dataset)

    @classmethod
    def from_config(
        cls,
        config: BoardConfig,
        dataset: Dataset | None = None,
        persist_sort: SortPersistHook | None = None,
        notifier: ChangeNotifier | None = None,
    ) -> "BoardStore":
        """Build a store from a loaded BoardConfig."""
        return cls(
            dataset=dataset,
            sort_config=config.sort_config,
            layout=config.layout,
            notifications_enabled=config.notifications_enabled,
            persist_sort=persist_sort,
            notifier=notifier,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def current_bucket(self) -> IssueStatus:
        """Bucket of the selected column."""
        return BUCKETS[self.selected_column]

    def column_state(self, bucket: IssueStatus) -> ColumnState:
        return self._columns[bucket]

    def bucket_items(self, bucket: IssueStatus) -> list[Issue]:
        """Filtered and sorted issues of one effective-status bucket."""
        issues = filter_issues(self._dataset.bucket(bucket), self.filter, self.search_query)
        return sort_issues(issues, self.sort_config.for_bucket(bucket))

    def get_bucket_view(self, bucket: IssueStatus | None = None) -> BucketView:
        """
        Render model for one column.

        Args:
            bucket: Column to describe (current column if None)

        Returns:
            BucketView with the full ordered list and the visible page
        """
        if bucket is None:
            bucket = self.current_bucket
        items = self.bucket_items(bucket)
        state = self._columns[bucket]
        pages = total_pages(len(items), self.page_size)
        offset = state.scroll_offset
        return BucketView(
            bucket=bucket,
            items=items,
            selected_id=state.selected_issue_id,
            scroll_offset=offset,
            page=min(page_of(offset, self.page_size), pages),
            total_pages=pages,
            visible_items=items[offset : offset + self.page_size],
            sort=self.sort_config.for_bucket(bucket),
        )

    def get_selected_issue(self) -> Issue | None:
        """The selected issue of the current column, or None."""
        issue_id = self._columns[self.current_bucket].selected_issue_id
        if issue_id is None:
            return None
        return self._dataset.get(issue_id)

    def get_tree(self) -> list[ForestNode]:
        """Parent/child forest of the current dataset."""
        return build_forest(self._dataset)

    def get_levels(self) -> list[list[Issue]]:
        """Dependency levels of the current dataset."""
        return dependency_levels(self._dataset)

    def get_stats(self) -> StatsSummary:
        """Summary statistics of the current dataset."""
        return compute_stats(self._dataset.issues)

    # ------------------------------------------------------------------
    # Dataset and selection reconciliation
    # ------------------------------------------------------------------

    def _set_column(self, bucket: IssueStatus, state: ColumnState) -> None:
        self._columns = {**self._columns, bucket: state}

    def _reconcile(self, bucket: IssueStatus) -> None:
        """Keep the selection if it is still in the bucket, else reset to the first item."""
        items = self.bucket_items(bucket)
        state = self._columns[bucket]
        if _index_of(items, state.selected_issue_id) is not None:
            return
        first_id = items[0].id if items else None
        self._set_column(bucket, ColumnState(selected_issue_id=first_id, scroll_offset=0))

    def _reconcile_all(self) -> None:
        for bucket in BUCKETS:
            self._reconcile(bucket)

    def apply_reload(self, dataset: Dataset) -> list[StatusChange]:
        """
        Swap in a freshly loaded dataset.

        Runs change detection against the previous snapshot (when
        notifications are enabled), stores a deep clone of the new
        dataset for the next comparison, and reconciles every column.

        Args:
            dataset: Newly loaded, resolved dataset

        Returns:
            Status changes detected against the previous snapshot
        """
        changes: list[StatusChange] = []
        if self.notifications_enabled and self._previous_snapshot is not None:
            changes = detect_status_changes(self._previous_snapshot, dataset.by_id)

        self._dataset = dataset
        self._previous_snapshot = dataset.snapshot()
        self._reconcile_all()
        logger.debug(
            f"Applied reload: {dataset.stats.total} issues, {len(changes)} status change(s)"
        )

        if changes and self.notifier is not None:
            self.notifier.dispatch(changes)
        return changes

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _move(self, delta: int) -> None:
        bucket = self.current_bucket
        items = self.bucket_items(bucket)
        if not items:
            return
        state = self._columns[bucket]
        index = _index_of(items, state.selected_issue_id)
        if index is None:
            self._set_column(bucket, ColumnState(selected_issue_id=items[0].id, scroll_offset=0))
            return

        new_index = min(max(index + delta, 0), len(items) - 1)
        offset = state.scroll_offset
        if new_index < offset:
            offset = new_index
        elif new_index >= offset + self.page_size:
            offset = new_index - self.page_size + 1
        self._set_column(
            bucket, ColumnState(selected_issue_id=items[new_index].id, scroll_offset=offset)
        )

    def move_up(self) -> None:
        """Select the previous issue in the current column."""
        self._move(-1)

    def move_down(self) -> None:
        """Select the next issue in the current column."""
        self._move(1)

    def move_left(self) -> None:
        """Select the column to the left (no wraparound)."""
        self.selected_column = max(self.selected_column - 1, 0)

    def move_right(self) -> None:
        """Select the column to the right (no wraparound)."""
        self.selected_column = min(self.selected_column + 1, len(BUCKETS) - 1)

    def jump_to_first(self) -> None:
        bucket = self.current_bucket
        items = self.bucket_items(bucket)
        first_id = items[0].id if items else None
        self._set_column(bucket, ColumnState(selected_issue_id=first_id, scroll_offset=0))

    def jump_to_last(self) -> None:
        bucket = self.current_bucket
        items = self.bucket_items(bucket)
        if not items:
            self._set_column(bucket, ColumnState())
            return
        last = len(items) - 1
        self._set_column(
            bucket,
            ColumnState(
                selected_issue_id=items[last].id,
                scroll_offset=max(last - self.page_size + 1, 0),
            ),
        )

    def jump_to_page(self, page: int) -> int:
        """
        Show a page of the current column and select its first issue.

        Args:
            page: 1-based page number, clamped to [1, total_pages]

        Returns:
            The page actually shown
        """
        bucket = self.current_bucket
        items = self.bucket_items(bucket)
        page = min(max(page, 1), total_pages(len(items), self.page_size))
        offset = (page - 1) * self.page_size
        selected_id = items[min(offset, len(items) - 1)].id if items else None
        self._set_column(bucket, ColumnState(selected_issue_id=selected_id, scroll_offset=offset))
        if self.active_overlay == Overlay.JUMP_TO_PAGE:
            self.active_overlay = Overlay.NONE
        return page

    def select_by_id(self, query: str) -> bool:
        """
        Select the first issue whose ID matches ``query``.

        Columns are searched in board order. An ID matches when it equals
        the query or contains it, ignoring case. On a match the column
        becomes current and scrolls to the page holding the issue.

        Returns:
            True if an issue was selected
        """
        needle = query.strip().lower()
        if not needle:
            return False

        for column, bucket in enumerate(BUCKETS):
            for index, issue in enumerate(self.bucket_items(bucket)):
                issue_id = issue.id.lower()
                if issue_id == needle or needle in issue_id:
                    self.selected_column = column
                    offset = (index // self.page_size) * self.page_size
                    self._set_column(
                        bucket, ColumnState(selected_issue_id=issue.id, scroll_offset=offset)
                    )
                    return True
        return False

    def set_page_size(self, page_size: int) -> None:
        """Change items per page. Scroll offsets are left as they are."""
        self.page_size = max(page_size, 1)

    def set_terminal_size(self, width: int, height: int) -> None:
        """Record the terminal size and derive the page size from it."""
        self.terminal_width = width
        self.terminal_height = height
        self.set_page_size(self.layout.items_per_page(height))

    # ------------------------------------------------------------------
    # Sorting and filtering
    # ------------------------------------------------------------------

    def resort(self, bucket: IssueStatus, spec: SortSpec) -> None:
        """
        Change one column's sort and persist the sort config.

        The selected issue stays selected; the scroll offset is kept.
        """
        self.sort_config = self.sort_config.with_bucket(bucket, spec)
        self._reconcile(bucket)
        logger.debug(f"Resorted {bucket.value} by {spec.label}")
        if self.persist_sort is not None:
            self.persist_sort(self.sort_config)

    def cycle_sort_field(self, bucket: IssueStatus | None = None) -> SortSpec:
        """Move a column (current by default) to the next sort field."""
        if bucket is None:
            bucket = self.current_bucket
        spec = self.sort_config.for_bucket(bucket).cycled()
        self.resort(bucket, spec)
        return spec

    def toggle_sort_order(self, bucket: IssueStatus | None = None) -> SortSpec:
        """Flip a column's (current by default) sort direction."""
        if bucket is None:
            bucket = self.current_bucket
        spec = self.sort_config.for_bucket(bucket).toggled()
        self.resort(bucket, spec)
        return spec

    def set_filter(self, criteria: IssueFilter) -> None:
        self.filter = criteria
        self._reconcile_all()

    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self._reconcile_all()

    def clear_filters(self) -> None:
        """Drop the filter and search query and close their panels."""
        self.filter = IssueFilter()
        self.search_query = ""
        if self.active_overlay in (Overlay.SEARCH, Overlay.FILTER):
            self.active_overlay = Overlay.NONE
        self._reconcile_all()

    # ------------------------------------------------------------------
    # Overlays, panels and views
    # ------------------------------------------------------------------

    def toggle_overlay(self, overlay: Overlay) -> None:
        """Open ``overlay`` (closing any other), or close it if already open."""
        self.active_overlay = Overlay.NONE if self.active_overlay == overlay else overlay

    def close_overlay(self) -> None:
        self.active_overlay = Overlay.NONE
        self.pending_confirm = None

    def toggle_details(self) -> None:
        self.show_details = not self.show_details

    def toggle_notifications(self) -> None:
        self.notifications_enabled = not self.notifications_enabled

    def set_view_mode(self, mode: ViewMode) -> None:
        """
        Switch screens.

        Entering a form remembers the last non-form view so
        return_to_previous_view can go back to it.
        """
        if mode.is_form:
            if not self.view_mode.is_form:
                self.previous_view = self.view_mode
        else:
            self.previous_view = mode
        self.view_mode = mode
        self.active_overlay = Overlay.NONE

    def navigate_to_create_issue(self) -> None:
        self.editing_issue_id = None
        self.set_view_mode(ViewMode.CREATE_ISSUE)

    def navigate_to_edit_issue(self) -> bool:
        """Open the edit form for the selected issue, if there is one."""
        issue = self.get_selected_issue()
        if issue is None:
            return False
        self.editing_issue_id = issue.id
        self.set_view_mode(ViewMode.EDIT_ISSUE)
        return True

    def return_to_previous_view(self) -> None:
        self.editing_issue_id = None
        self.set_view_mode(self.previous_view)

    def request_confirm(self, title: str, message: str, on_confirm: Callable[[], None]) -> None:
        """Ask a yes/no question; ``on_confirm`` runs only on yes."""
        self.pending_confirm = ConfirmRequest(title=title, message=message, on_confirm=on_confirm)
        self.active_overlay = Overlay.CONFIRM

    def resolve_confirm(self, accepted: bool) -> bool:
        """
        Answer the pending confirmation.

        The dialog is closed before the action runs; an exception raised
        by the action propagates to the caller.

        Returns:
            True if the confirm action ran
        """
        request = self.pending_confirm
        self.pending_confirm = None
        if self.active_overlay == Overlay.CONFIRM:
            self.active_overlay = Overlay.NONE
        if request is None or not accepted:
            return False
        request.on_confirm()
        return True
