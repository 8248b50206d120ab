"""
Issue mutation via the beads CLI.

The board never writes to the beads store itself. Updates and creates
are delegated to the `bd` command; the caller triggers a reload once the
command has returned, and the new state becomes visible only then.
"""

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any

from .exceptions import BeadsNotAvailableError, MutationError
from .models import IssueStatus, IssueType

logger = logging.getLogger(__name__)


class BeadsClient:
    """
    Thin wrapper around the `bd` CLI for write operations.

    Example:
        >>> client = BeadsClient(project_dir=Path("."))
        >>> client.update_issue("bd-1", status=IssueStatus.IN_PROGRESS)
        >>> new_id = client.create_issue("Write docs", priority=3)
    """

    def __init__(self, project_dir: Path | None = None):
        """
        Initialize the client.

        Args:
            project_dir: Directory bd runs in (defaults to current directory)

        Raises:
            BeadsNotAvailableError: If bd CLI is not installed
        """
        self.project_dir = project_dir or Path.cwd()

        if not self._is_bd_available():
            raise BeadsNotAvailableError(
                "beads CLI (bd) is not installed. "
                "Install with: npm install -g @beads/bd OR brew install steveyegge/beads/bd"
            )

    def _is_bd_available(self) -> bool:
        """Check if bd CLI is installed and available."""
        return shutil.which("bd") is not None

    def _run_bd(self, args: list[str], expect_json: bool = False) -> Any:
        """
        Run a bd CLI command.

        Args:
            args: Command arguments (e.g., ["update", "bd-1", "--status", "closed"])
            expect_json: Whether to parse stdout as JSON

        Returns:
            Parsed JSON output, or None if expect_json is False

        Raises:
            MutationError: If the command fails or its output is unusable
        """
        cmd = ["bd"] + args
        logger.debug(f"Running {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=self.project_dir,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise BeadsNotAvailableError(f"beads CLI (bd) could not be started: {e}") from e
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else str(e)
            raise MutationError(f"bd command failed: {' '.join(cmd)}\nError: {error_msg}") from e

        if not expect_json:
            return None

        try:
            return json.loads(result.stdout) if result.stdout else None
        except json.JSONDecodeError as e:
            raise MutationError(
                f"Failed to parse bd output as JSON: {e}\n"
                f"Command: {' '.join(cmd)}\n"
                f"Output: {result.stdout[:200]}"
            ) from e

    def update_issue(
        self,
        issue_id: str,
        status: IssueStatus | None = None,
        priority: int | None = None,
        assignee: str | None = None,
        title: str | None = None,
        description: str | None = None,
        labels: list[str] | None = None,
    ) -> None:
        """
        Update an issue's fields.

        Only the fields given are sent to bd.

        Raises:
            MutationError: If nothing was given to update or bd fails
        """
        args = ["update", issue_id]

        if status is not None:
            args.extend(["--status", status.value])
        if priority is not None:
            args.extend(["--priority", str(priority)])
        if assignee is not None:
            args.extend(["--assignee", assignee])
        if title is not None:
            args.extend(["--title", title])
        if description is not None:
            args.extend(["--description", description])
        if labels is not None:
            args.extend(["--labels", ",".join(labels)])

        if len(args) == 2:
            raise MutationError(f"No fields given to update for {issue_id}")

        self._run_bd(args)

    def close_issue(self, issue_id: str, reason: str | None = None) -> None:
        """Close an issue, optionally recording a reason."""
        args = ["close", issue_id]
        if reason:
            args.extend(["-r", reason])
        self._run_bd(args)

    def create_issue(
        self,
        title: str,
        description: str = "",
        issue_type: IssueType = IssueType.TASK,
        priority: int = 2,
        assignee: str | None = None,
        labels: list[str] | None = None,
        parent: str | None = None,
    ) -> str:
        """
        Create a new issue.

        Returns:
            The new issue's ID

        Raises:
            MutationError: If bd fails or does not report an ID
        """
        args = ["create", title, "--json", "--type", issue_type.value, "-p", str(priority)]

        if description:
            args.extend(["--description", description])
        if assignee:
            args.extend(["--assignee", assignee])
        if labels:
            args.extend(["--labels", ",".join(labels)])
        if parent:
            args.extend(["--parent", parent])

        result = self._run_bd(args, expect_json=True)
        if not isinstance(result, dict) or not result.get("id"):
            raise MutationError(f"Unexpected result from bd create: {result}")
        return str(result["id"])
