"""
Issue export formatting.

Renders a single issue as Markdown, JSON or plain text, for copying to
the clipboard or printing from the CLI.
"""

import json
from datetime import datetime
from enum import Enum

from beadboard.core.issues.models import Issue


class ExportFormat(str, Enum):
    """Supported export formats."""

    MARKDOWN = "markdown"
    JSON = "json"
    TEXT = "text"


def _relations(issue: Issue) -> list[tuple[str, list[str]]]:
    sections = []
    if issue.children:
        sections.append(("Children", issue.children))
    if issue.blocked_by:
        sections.append(("Blocked By", issue.blocked_by))
    if issue.blocks:
        sections.append(("Blocks", issue.blocks))
    return sections


def _timestamp(value: datetime | None) -> str:
    return value.isoformat() if value is not None else "-"


def format_markdown(issue: Issue) -> str:
    lines = [
        f"# {issue.title}",
        "",
        f"**ID:** {issue.id}",
        f"**Status:** {issue.effective_status.value}",
        f"**Priority:** P{issue.priority}",
        f"**Type:** {issue.issue_type.value}",
    ]
    if issue.assignee:
        lines.append(f"**Assignee:** {issue.assignee}")
    if issue.labels:
        lines.append(f"**Labels:** {', '.join(issue.labels)}")

    lines += ["", "## Description", "", issue.description or "(no description)"]

    if issue.parent:
        lines += ["", "## Parent", "", issue.parent]
    for heading, ids in _relations(issue):
        lines += ["", f"## {heading}", ""]
        lines += [f"- {issue_id}" for issue_id in ids]

    lines += [
        "",
        "---",
        f"Created: {_timestamp(issue.created_at)}",
        f"Updated: {_timestamp(issue.updated_at)}",
    ]
    if issue.closed_at:
        lines.append(f"Closed: {_timestamp(issue.closed_at)}")
    return "\n".join(lines)


def format_text(issue: Issue) -> str:
    lines = [
        issue.title,
        "=" * len(issue.title),
        "",
        f"ID: {issue.id}",
        f"Status: {issue.effective_status.value}",
        f"Priority: P{issue.priority}",
        f"Type: {issue.issue_type.value}",
    ]
    if issue.assignee:
        lines.append(f"Assignee: {issue.assignee}")
    if issue.labels:
        lines.append(f"Labels: {', '.join(issue.labels)}")

    lines += ["", "Description:", issue.description or "(no description)"]

    if issue.parent:
        lines += ["", f"Parent: {issue.parent}"]
    for heading, ids in _relations(issue):
        lines += ["", f"{heading}:"]
        lines += [f"  - {issue_id}" for issue_id in ids]

    lines += [
        "",
        f"Created: {_timestamp(issue.created_at)}",
        f"Updated: {_timestamp(issue.updated_at)}",
    ]
    if issue.closed_at:
        lines.append(f"Closed: {_timestamp(issue.closed_at)}")
    return "\n".join(lines)


def format_json(issue: Issue) -> str:
    data = issue.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2)


def format_issue(issue: Issue, fmt: ExportFormat = ExportFormat.MARKDOWN) -> str:
    """
    Render an issue in the requested format.

    Args:
        issue: Issue to export
        fmt: Output format

    Returns:
        Formatted text
    """
    if fmt == ExportFormat.JSON:
        return format_json(issue)
    if fmt == ExportFormat.TEXT:
        return format_text(issue)
    return format_markdown(issue)
