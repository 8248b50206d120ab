"""
Issue data models for beadboard.

Defines the Issue record read from a beads store, the typed dependency
edges between issues, and the Dataset snapshot that every board view is
projected from. All models are Pydantic models; Issue and Dataset are
frozen so a snapshot can be shared with the render layer without copying.
"""

import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def _normalise_timestamp(v: object) -> object:
    """Trim nanosecond precision (Go RFC 3339) down to microseconds."""
    if isinstance(v, str):
        if not v.strip():
            return None
        return _FRACTION_RE.sub(r"\1", v.strip())
    return v


class IssueStatus(str, Enum):
    """Issue status values.

    BLOCKED is both a stored status and the derived status of an open
    issue that still has open blockers (see Issue.effective_status).
    """

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    CLOSED = "closed"


# Board column order. Bucket lookups, searches and column indices all use it.
BUCKETS: tuple[IssueStatus, ...] = (
    IssueStatus.OPEN,
    IssueStatus.IN_PROGRESS,
    IssueStatus.BLOCKED,
    IssueStatus.CLOSED,
)


class IssueType(str, Enum):
    """Issue type values used by beads."""

    TASK = "task"
    EPIC = "epic"
    BUG = "bug"
    FEATURE = "feature"
    CHORE = "chore"


class DependencyType(str, Enum):
    """Kinds of dependency edges stored by beads."""

    BLOCKS = "blocks"
    RELATED = "related"
    PARENT_CHILD = "parent-child"
    DISCOVERED_FROM = "discovered-from"


class DataSource(str, Enum):
    """Backing store a dataset was loaded from."""

    SQLITE = "sqlite"
    JSONL = "jsonl"


class Dependency(BaseModel):
    """
    A typed edge between two issues.

    ``issue_id`` is the edge source and ``depends_on_id`` the target:
    for ``parent-child`` the target is the parent, for ``blocks`` the
    target is the blocker.
    """

    model_config = ConfigDict(frozen=True)

    issue_id: str = Field(..., description="Edge source issue ID")
    depends_on_id: str = Field(..., description="Edge target issue ID")
    type: DependencyType = Field(default=DependencyType.BLOCKS, description="Edge kind")


class Comment(BaseModel):
    """A comment attached to an issue (JSONL exports only)."""

    model_config = ConfigDict(frozen=True)

    id: int
    issue_id: str
    author: str = ""
    text: str = ""
    created_at: datetime | None = None

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_timestamp(cls, v: object) -> object:
        return _normalise_timestamp(v)


class Issue(BaseModel):
    """
    An issue in a beads snapshot.

    Stored fields come straight from the backing store. The relational
    fields (parent, children, blocked_by, blocks) are derived by the
    resolver and are rebuilt on every resolution pass.

    Example:
        >>> issue = Issue(id="bd-1", title="Fix login", priority=3)
        >>> issue.effective_status
        <IssueStatus.OPEN: 'open'>
        >>> issue.model_copy(update={"blocked_by": ["bd-2"]}).effective_status
        <IssueStatus.BLOCKED: 'blocked'>
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Stored fields
    id: str = Field(..., min_length=1, description="Stable unique issue identifier")
    title: str = Field(default="", description="Issue title")
    description: str = Field(default="", description="Issue description (may contain markdown)")
    status: IssueStatus = Field(default=IssueStatus.OPEN, description="Stored issue status")
    priority: int = Field(default=2, ge=0, le=4, description="Priority 0-4, ordered numerically")
    issue_type: IssueType = Field(default=IssueType.TASK, description="Issue type")
    assignee: str | None = Field(default=None, description="Assigned user")
    labels: list[str] = Field(default_factory=list, description="Issue labels")
    created_at: datetime | None = Field(default=None, description="When the issue was created")
    updated_at: datetime | None = Field(default=None, description="When the issue was updated")
    closed_at: datetime | None = Field(default=None, description="When the issue was closed")

    # Optional JSONL fields
    design: str | None = None
    acceptance_criteria: str | None = None
    notes: str | None = None
    estimated_minutes: int | None = None
    close_reason: str | None = None
    external_ref: str | None = None
    comments: list[Comment] = Field(default_factory=list)

    # Derived by the resolver
    parent: str | None = Field(default=None, description="Parent issue ID")
    children: list[str] = Field(default_factory=list, description="Child issue IDs")
    blocked_by: list[str] = Field(
        default_factory=list,
        description="IDs of open issues blocking this one",
        alias="blockedBy",
    )
    blocks: list[str] = Field(default_factory=list, description="IDs of issues this one blocks")

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v: int | str | None) -> int | str:
        """Accept numeric priorities and "P0"-"P4" strings."""
        if v is None:
            return 2
        if isinstance(v, str):
            text = v.strip().upper()
            return int(text[1:]) if text.startswith("P") else int(text)
        return v

    @field_validator("issue_type", mode="before")
    @classmethod
    def validate_issue_type(cls, v: str | IssueType | None) -> IssueType:
        """Map unknown issue types onto TASK."""
        if isinstance(v, IssueType):
            return v
        try:
            return IssueType(v)
        except ValueError:
            return IssueType.TASK

    @field_validator("labels", mode="before")
    @classmethod
    def validate_labels(cls, v: list[str] | None) -> list[str]:
        """Drop duplicate labels, keeping first occurrence."""
        if not v:
            return []
        return list(dict.fromkeys(v))

    @field_validator("assignee", mode="before")
    @classmethod
    def validate_assignee(cls, v: str | None) -> str | None:
        """Normalise empty assignees to None."""
        return v or None

    @field_validator("title", "description", mode="before")
    @classmethod
    def validate_text(cls, v: str | None) -> str:
        """SQLite rows carry NULL for empty text columns."""
        return "" if v is None else v

    @field_validator("created_at", "updated_at", "closed_at", mode="before")
    @classmethod
    def validate_timestamp(cls, v: object) -> object:
        """Accept Go RFC 3339 timestamps with nanosecond precision."""
        return _normalise_timestamp(v)

    @computed_field
    @property
    def effective_status(self) -> IssueStatus:
        """
        Status shown on the board.

        An open issue with at least one open blocker is displayed as
        blocked. The stored status is never changed by this rule.
        """
        if self.status == IssueStatus.OPEN and self.blocked_by:
            return IssueStatus.BLOCKED
        return self.status

    @property
    def is_blocked(self) -> bool:
        """True when the issue is displayed in the blocked bucket."""
        return self.effective_status == IssueStatus.BLOCKED

    @property
    def has_relationships(self) -> bool:
        """True when the issue has a parent, child, blocker or blockee."""
        return bool(self.parent or self.children or self.blocked_by or self.blocks)


class DatasetStats(BaseModel):
    """Issue counts per effective status."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    open: int = 0
    in_progress: int = 0
    blocked: int = 0
    closed: int = 0

    def count(self, status: IssueStatus) -> int:
        """Return the count for a single bucket."""
        return int(getattr(self, status.value))


def _empty_buckets() -> dict[IssueStatus, list[Issue]]:
    return {bucket: [] for bucket in BUCKETS}


class Dataset(BaseModel):
    """
    One fully resolved snapshot of a beads store.

    Datasets are rebuilt wholesale on every reload and never mutated in
    place; consumers swap the whole object.
    """

    model_config = ConfigDict(frozen=True)

    issues: list[Issue] = Field(default_factory=list, description="Issues in load order")
    by_status: dict[IssueStatus, list[Issue]] = Field(
        default_factory=_empty_buckets,
        description="Issues keyed by effective status, in load order",
    )
    by_id: dict[str, Issue] = Field(default_factory=dict, description="Issue lookup by ID")
    stats: DatasetStats = Field(default_factory=DatasetStats)
    dependencies: list[Dependency] = Field(
        default_factory=list, description="Raw dependency edges as loaded"
    )
    data_source: DataSource | None = Field(default=None, description="Where the data came from")

    @classmethod
    def empty(cls) -> "Dataset":
        """Dataset with no issues, used before the first load."""
        return cls()

    def bucket(self, status: IssueStatus) -> list[Issue]:
        """Issues in one effective-status bucket (load order)."""
        return self.by_status.get(status, [])

    def get(self, issue_id: str) -> Issue | None:
        """Look up an issue by ID."""
        return self.by_id.get(issue_id)

    def snapshot(self) -> dict[str, Issue]:
        """Deep-cloned ID → issue map for change detection."""
        return {issue_id: issue.model_copy(deep=True) for issue_id, issue in self.by_id.items()}
