"""
Rich-based renderer for beadboard.

Turns the read side of a BoardStore into Rich renderables: the kanban
board, the parent/child tree, the dependency levels, the stats view and
the issue detail panel.
"""

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from beadboard.core.board.state import BucketView, ViewMode
from beadboard.core.board.store import BoardStore
from beadboard.core.issues.graph import build_forest, flatten_forest
from beadboard.core.issues.models import BUCKETS, Dataset, Issue, IssueStatus
from beadboard.core.stats import StatsSummary

STATUS_COLORS = {
    IssueStatus.OPEN: "cyan",
    IssueStatus.IN_PROGRESS: "yellow",
    IssueStatus.BLOCKED: "red",
    IssueStatus.CLOSED: "green",
}

STATUS_TITLES = {
    IssueStatus.OPEN: "Open",
    IssueStatus.IN_PROGRESS: "In Progress",
    IssueStatus.BLOCKED: "Blocked",
    IssueStatus.CLOSED: "Closed",
}

PRIORITY_STYLES = {4: "bold red", 3: "red", 2: "yellow", 1: "blue", 0: "dim"}


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(width - 1, 0)] + "…"


class BoardRenderer:
    """
    Render board views using Rich.

    Example:
        >>> renderer = BoardRenderer()
        >>> renderer.console.print(renderer.render(store))
    """

    def __init__(self, console: Console | None = None, column_width: int = 30):
        """
        Initialize the renderer.

        Args:
            console: Rich console for rendering. If None, creates a new one.
            column_width: Characters per board column
        """
        self.console = console or Console()
        self.column_width = column_width

    def render(self, store: BoardStore) -> RenderableType:
        """Render whichever view the store is currently showing."""
        if store.view_mode == ViewMode.TREE:
            body = self.render_tree(store.dataset)
        elif store.view_mode == ViewMode.GRAPH:
            body = self.render_levels(store.get_levels())
        elif store.view_mode == ViewMode.STATS:
            body = self.render_stats(store.get_stats())
        else:
            body = self.render_board(store)

        if store.show_details and (issue := store.get_selected_issue()) is not None:
            return Group(body, self.render_issue(issue))
        return body

    def render_board(self, store: BoardStore) -> RenderableType:
        """Render the four-column kanban board with a stats header."""
        stats = store.dataset.stats
        header = Text(justify="center")
        header.append("BEADBOARD", style="bold cyan")
        header.append(
            f"  {stats.total} issues  |  {stats.open} open  |  {stats.in_progress} in progress"
            f"  |  {stats.blocked} blocked  |  {stats.closed} closed"
        )
        if store.search_query or store.filter.is_active:
            header.append("  [filtered]", style="magenta")

        grid = Table.grid(padding=(0, 1), expand=False)
        for _ in BUCKETS:
            grid.add_column(width=self.column_width)
        grid.add_row(
            *(
                self._render_column(store.get_bucket_view(bucket), column == store.selected_column)
                for column, bucket in enumerate(BUCKETS)
            )
        )
        return Group(header, grid)

    def _render_column(self, view: BucketView, is_current: bool) -> Panel:
        color = STATUS_COLORS[view.bucket]
        width = self.column_width - 4

        if not view.items:
            content: RenderableType = Text("No issues", style="dim italic", justify="center")
        else:
            lines = []
            for issue in view.visible_items:
                selected = is_current and issue.id == view.selected_id
                lines.append(self._render_card(issue, selected, width))
            content = Group(*lines)

        return Panel(
            content,
            title=f"[bold {color}]{STATUS_TITLES[view.bucket]}[/] ({len(view.items)})",
            subtitle=f"{view.sort.label}  {view.page}/{view.total_pages}",
            border_style=f"bold {color}" if is_current else "dim",
            padding=(0, 1),
        )

    def _render_card(self, issue: Issue, selected: bool, width: int) -> Text:
        card = Text()
        card.append("▶ " if selected else "  ", style="bold")
        card.append(f"P{issue.priority} ", style=PRIORITY_STYLES.get(issue.priority, ""))
        card.append(issue.id, style="bold" if selected else "dim")
        card.append("\n  ")
        card.append(_truncate(issue.title, width - 2), style="reverse" if selected else "")
        if issue.assignee:
            card.append(f"\n  @{_truncate(issue.assignee, width - 3)}", style="dim")
        return card

    def render_tree(self, dataset: Dataset) -> Panel:
        """Render the parent/child forest with box-drawing connectors."""
        text = Text()
        for node in flatten_forest(build_forest(dataset)):
            connector = "└─" if node.is_last else "├─"
            text.append(f"{node.prefix}{connector} ", style="dim")
            text.append(node.issue.id, style=STATUS_COLORS[node.issue.effective_status])
            text.append(f" {node.issue.title}\n")

        if not text.plain:
            text = Text("No issues", style="dim italic")
        return Panel(text, title="[bold]Tree[/bold]", border_style="cyan")

    def render_levels(self, levels: list[list[Issue]]) -> Panel:
        """Render the dependency levels, one row per level."""
        if not levels:
            return Panel(
                Text("No dependencies", style="dim italic"),
                title="[bold]Dependencies[/bold]",
                border_style="cyan",
            )

        table = Table(show_header=True, header_style="bold", expand=True)
        table.add_column("Level", justify="right", width=6)
        table.add_column("Issues")
        for level, issues in enumerate(levels):
            row = Text()
            for issue in issues:
                row.append(f"{issue.id} ", style=STATUS_COLORS[issue.effective_status])
                if issue.blocked_by:
                    row.append(f"← {', '.join(issue.blocked_by)}  ", style="dim")
            table.add_row(str(level), row)
        return Panel(table, title="[bold]Dependencies[/bold]", border_style="cyan")

    def render_stats(self, stats: StatsSummary) -> Panel:
        """Render summary statistics."""
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold cyan", justify="right")
        table.add_column()

        table.add_row("Total:", str(stats.total))
        for status, count in stats.by_status.items():
            table.add_row(f"{STATUS_TITLES[status]}:", str(count))
        table.add_row("Completion:", f"{stats.completion_rate}%")
        table.add_row("Blocked:", f"{stats.blocked_rate}%")
        table.add_row(
            "Priority:",
            "  ".join(f"P{priority}={count}" for priority, count in stats.by_priority.items()),
        )
        table.add_row(
            "Type:",
            "  ".join(f"{issue_type.value}={count}" for issue_type, count in stats.by_type.items()),
        )
        if stats.top_assignees:
            table.add_row(
                "Assignees:", ", ".join(f"{name} ({count})" for name, count in stats.top_assignees)
            )
        if stats.top_labels:
            table.add_row(
                "Labels:", ", ".join(f"{name} ({count})" for name, count in stats.top_labels)
            )
        return Panel(table, title="[bold]Statistics[/bold]", border_style="green", padding=(1, 2))

    def render_issue(self, issue: Issue) -> Panel:
        """Render the detail panel for one issue."""
        status = issue.effective_status
        content = Table.grid(padding=(0, 2))
        content.add_column(style="bold cyan", justify="right")
        content.add_column()

        content.add_row("ID:", issue.id)
        content.add_row("Status:", Text(status.value, style=STATUS_COLORS[status]))
        content.add_row("Priority:", f"P{issue.priority}")
        content.add_row("Type:", issue.issue_type.value)
        if issue.assignee:
            content.add_row("Assignee:", issue.assignee)
        if issue.labels:
            content.add_row("Labels:", ", ".join(issue.labels))
        if issue.parent:
            content.add_row("Parent:", issue.parent)
        if issue.children:
            content.add_row("Children:", ", ".join(issue.children))
        if issue.blocked_by:
            content.add_row("Blocked by:", Text(", ".join(issue.blocked_by), style="red"))
        if issue.blocks:
            content.add_row("Blocks:", ", ".join(issue.blocks))
        if issue.description:
            content.add_row("", "")
            content.add_row("Description:", issue.description)

        return Panel(
            content,
            title=f"[bold]{issue.title}[/bold]",
            border_style=STATUS_COLORS[status],
            padding=(1, 2),
        )

    def start_live(self, store: BoardStore) -> Live:
        """
        Start a Live display of the store's current view.

        Args:
            store: Store to render

        Returns:
            Live context manager for updating the display
        """
        return Live(
            self.render(store),
            console=self.console,
            refresh_per_second=4,
            screen=False,
        )
