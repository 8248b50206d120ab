"""
Value objects held by the board store.

Every piece of per-column state is a frozen model that the store replaces
wholesale, so a reader never observes a half-applied transition.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from beadboard.core.issues.models import Issue, IssueStatus
from beadboard.core.issues.sorting import SortSpec


class Overlay(str, Enum):
    """The one panel or dialog drawn over the current view, if any."""

    NONE = "none"
    HELP = "help"
    SEARCH = "search"
    FILTER = "filter"
    EXPORT = "export"
    THEME = "theme"
    JUMP_TO_PAGE = "jump_to_page"
    CONFIRM = "confirm"


class ViewMode(str, Enum):
    """Top-level screens."""

    KANBAN = "kanban"
    TREE = "tree"
    GRAPH = "graph"
    STATS = "stats"
    CREATE_ISSUE = "create_issue"
    EDIT_ISSUE = "edit_issue"

    @property
    def is_form(self) -> bool:
        return self in (ViewMode.CREATE_ISSUE, ViewMode.EDIT_ISSUE)


class ColumnState(BaseModel):
    """Selection and scroll position of one board column."""

    model_config = ConfigDict(frozen=True)

    selected_issue_id: str | None = Field(default=None, description="Selected issue ID")
    scroll_offset: int = Field(default=0, ge=0, description="Index of first visible item")


class BucketView(BaseModel):
    """Everything the renderer needs to draw one column."""

    model_config = ConfigDict(frozen=True)

    bucket: IssueStatus
    items: list[Issue] = Field(default_factory=list, description="Filtered and sorted issues")
    selected_id: str | None = None
    scroll_offset: int = 0
    page: int = 1
    total_pages: int = 1
    visible_items: list[Issue] = Field(default_factory=list, description="Current page window")
    sort: SortSpec = Field(default_factory=SortSpec)

    @property
    def selected_index(self) -> int | None:
        """Position of the selected issue in ``items``."""
        for index, issue in enumerate(self.items):
            if issue.id == self.selected_id:
                return index
        return None


@dataclass(frozen=True)
class ConfirmRequest:
    """A pending yes/no question and the action to run on yes."""

    title: str
    message: str
    on_confirm: Callable[[], None]


def total_pages(count: int, page_size: int) -> int:
    """Number of pages for ``count`` items (at least 1)."""
    return max(math.ceil(count / page_size), 1)


def page_of(offset: int, page_size: int) -> int:
    """1-based page number containing ``offset``."""
    return offset // page_size + 1
