"""
Configuration data models for beadboard.

These models define the structure of .beads/bdui-config.json and
~/.config/beadboard/config.json, with validation via Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field

from beadboard.core.issues.models import IssueStatus
from beadboard.core.issues.sorting import SortSpec

CONFIG_VERSION = "1.0"


class SortConfig(BaseModel):
    """
    Sort settings for each board column.

    Persisted per project so a re-sorted column comes back the same way
    on the next launch.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    open: SortSpec = Field(default_factory=SortSpec)
    in_progress: SortSpec = Field(default_factory=SortSpec)
    blocked: SortSpec = Field(default_factory=SortSpec)
    closed: SortSpec = Field(default_factory=SortSpec)

    def for_bucket(self, bucket: IssueStatus) -> SortSpec:
        """Sort spec of one column."""
        spec: SortSpec = getattr(self, bucket.value)
        return spec

    def with_bucket(self, bucket: IssueStatus, spec: SortSpec) -> "SortConfig":
        """Copy with one column's spec replaced."""
        return self.model_copy(update={bucket.value: spec})


class LayoutConfig(BaseModel):
    """
    Terminal layout constants used to derive the page size.

    The page size is the number of issue cards that fit in the terminal
    after subtracting the header/footer rows.
    """

    ui_overhead: int = Field(
        default=8, ge=0, description="Rows used by header, stats line and footer"
    )
    issue_card_height: int = Field(default=4, ge=1, description="Rows per issue card")
    column_width: int = Field(default=30, ge=10, description="Characters per board column")

    def items_per_page(self, terminal_height: int) -> int:
        """Number of cards that fit in a terminal of the given height."""
        available = max(terminal_height - self.ui_overhead, self.issue_card_height)
        return max(available // self.issue_card_height, 1)


class BoardConfig(BaseModel):
    """
    Main beadboard configuration.

    Merged from built-in defaults, the user config, the project's
    bdui-config.json and environment variables.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(default=CONFIG_VERSION, description="Config file format version")
    sort_config: SortConfig = Field(
        default_factory=SortConfig,
        alias="sortConfig",
        description="Per-column sort settings",
    )
    notifications_enabled: bool = Field(
        default=True, description="Emit completion/blocked notifications on reload"
    )
    debounce_ms: int = Field(
        default=100, ge=0, description="Quiet period before a file change triggers a reload"
    )
    poll_interval: float = Field(
        default=0.25, gt=0.0, description="Seconds between data file checks"
    )
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
