"""
Dataset loading from a beads directory.

Reads issues, labels and dependency edges from either the SQLite database
(`.beads/beads.db`, preferred) or the JSONL export (`.beads/issues.jsonl`)
and returns a fully resolved Dataset.

Malformed records are skipped with a warning; loading continues with the
remaining valid records. A directory with no data source at all raises
BeadsNotFoundError.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import closing
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from beadboard.utils.project import DATA_SOURCE_FILES, get_beads_dir, get_data_source

from .exceptions import BeadsNotFoundError, IssueParseError
from .models import DataSource, Dataset, Dependency, Issue
from .resolver import build_dataset
from .sorting import SortField, SortOrder, SortSpec, sort_issues

logger = logging.getLogger(__name__)

# Load order: priority desc, then created desc (applied as two stable sorts)
_BY_CREATED_DESC = SortSpec(sort_by=SortField.CREATED, sort_order=SortOrder.DESC)
_BY_PRIORITY_DESC = SortSpec(sort_by=SortField.PRIORITY, sort_order=SortOrder.DESC)


def load_order(issues: list[Issue]) -> list[Issue]:
    """Order issues by priority desc, created desc."""
    return sort_issues(sort_issues(issues, _BY_CREATED_DESC), _BY_PRIORITY_DESC)


def parse_issue_record(record: Any, line_num: int | None = None) -> Issue:
    """
    Validate one raw issue record.

    Args:
        record: Decoded JSON object or database row dict
        line_num: Source line number for error messages

    Returns:
        Issue model (relational fields not yet derived)

    Raises:
        IssueParseError: If the record is not an object or fails validation
    """
    if not isinstance(record, dict):
        raise IssueParseError(
            f"expected JSON object, got {type(record).__name__}", line_num=line_num
        )
    data = {key: value for key, value in record.items() if key != "dependencies"}
    try:
        return Issue.model_validate(data)
    except ValidationError as e:
        issue_id = record.get("id", "<unknown>")
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise IssueParseError(f"invalid issue {issue_id}: {errors}", line_num=line_num) from e


def parse_dependency_records(records: Any, issue_id: str) -> list[Dependency]:
    """
    Validate embedded dependency records, dropping invalid ones.

    Args:
        records: Raw ``dependencies`` value from a JSONL issue
        issue_id: Owning issue, used when a record omits ``issue_id``

    Returns:
        Valid dependency edges
    """
    if not isinstance(records, list):
        return []
    edges: list[Dependency] = []
    for raw in records:
        if not isinstance(raw, dict):
            continue
        try:
            edges.append(
                Dependency(
                    issue_id=raw.get("issue_id") or issue_id,
                    depends_on_id=raw.get("depends_on_id", ""),
                    type=raw.get("type", "blocks"),
                )
            )
        except ValidationError:
            logger.debug(f"Skipping unrecognised dependency on {issue_id}: {raw}")
    return edges


def _iter_jsonl(path: Path) -> Iterator[tuple[int, bytes]]:
    with path.open("rb") as f:
        for line_num, line in enumerate(f, start=1):
            line = line.strip()
            if line:
                yield line_num, line


def _decode_line(line: bytes, line_num: int) -> Any:
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError as e:
        raise IssueParseError(f"invalid UTF-8 - {e}", line_num=line_num) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise IssueParseError(f"invalid JSON - {e}", line_num=line_num) from e


def load_jsonl(beads_dir: Path) -> Dataset:
    """
    Load a dataset from .beads/issues.jsonl.

    Each non-empty line is one issue object, optionally carrying its
    ``dependencies`` inline.

    Args:
        beads_dir: Path to the .beads directory

    Returns:
        Resolved Dataset

    Raises:
        BeadsNotFoundError: If the file cannot be read
    """
    jsonl_path = beads_dir / DATA_SOURCE_FILES[DataSource.JSONL]
    issues: list[Issue] = []
    dependencies: list[Dependency] = []

    try:
        for line_num, line in _iter_jsonl(jsonl_path):
            try:
                record = _decode_line(line, line_num)
                issue = parse_issue_record(record, line_num=line_num)
            except IssueParseError as e:
                logger.warning(f"Skipping record in {jsonl_path}: {e}")
                continue
            issues.append(issue)
            dependencies.extend(parse_dependency_records(record.get("dependencies"), issue.id))
    except OSError as e:
        raise BeadsNotFoundError(f"Failed to read {jsonl_path}: {e}", path=jsonl_path) from e

    return build_dataset(load_order(issues), dependencies, DataSource.JSONL)


def _query_optional(conn: sqlite3.Connection, sql: str) -> list[sqlite3.Row]:
    """Run a query against a table that older databases may lack."""
    try:
        return conn.execute(sql).fetchall()
    except sqlite3.OperationalError as e:
        logger.debug(f"Optional query failed ({e}); treating as empty")
        return []


def load_sqlite(beads_dir: Path) -> Dataset:
    """
    Load a dataset from .beads/beads.db.

    Reads the ``issues`` table plus the ``labels`` and ``dependencies``
    tables. Rows that fail validation are skipped with a warning.

    Args:
        beads_dir: Path to the .beads directory

    Returns:
        Resolved Dataset

    Raises:
        sqlite3.DatabaseError: If the issues table cannot be read
    """
    db_path = beads_dir / DATA_SOURCE_FILES[DataSource.SQLITE]

    with closing(sqlite3.connect(db_path)) as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute(
            "SELECT * FROM issues ORDER BY priority DESC, created_at DESC"
        ).fetchall()
        label_rows = _query_optional(conn, "SELECT issue_id, label FROM labels")
        dep_rows = _query_optional(
            conn, "SELECT issue_id, depends_on_id, type FROM dependencies"
        )

    labels: dict[str, list[str]] = {}
    for row in label_rows:
        labels.setdefault(row["issue_id"], []).append(row["label"])

    issues: list[Issue] = []
    for row in rows:
        record = dict(row)
        record["labels"] = labels.get(record.get("id", ""), [])
        try:
            issues.append(parse_issue_record(record))
        except IssueParseError as e:
            logger.warning(f"Skipping row in {db_path}: {e}")

    dependencies: list[Dependency] = []
    for row in dep_rows:
        try:
            dependencies.append(
                Dependency(
                    issue_id=row["issue_id"],
                    depends_on_id=row["depends_on_id"],
                    type=row["type"],
                )
            )
        except ValidationError:
            logger.debug(f"Skipping unrecognised dependency row: {dict(row)}")

    return build_dataset(load_order(issues), dependencies, DataSource.SQLITE)


def load_dataset(beads_dir: Path | None = None) -> Dataset:
    """
    Load a fully resolved Dataset from a beads directory.

    SQLite is preferred. If the database exists but cannot be read and a
    JSONL export is present, the JSONL export is used instead.

    Args:
        beads_dir: Path to the .beads directory (searched upward from the
            current directory if None)

    Returns:
        Resolved Dataset

    Raises:
        BeadsNotFoundError: If no readable data source exists
    """
    if beads_dir is None:
        beads_dir = get_beads_dir()

    source = get_data_source(beads_dir)
    if source is None:
        raise BeadsNotFoundError(
            f"No data source found at {beads_dir} "
            f"(checked {', '.join(DATA_SOURCE_FILES.values())})",
            path=beads_dir,
        )

    if source == DataSource.SQLITE:
        try:
            return load_sqlite(beads_dir)
        except sqlite3.DatabaseError as e:
            jsonl_path = beads_dir / DATA_SOURCE_FILES[DataSource.JSONL]
            if not jsonl_path.is_file():
                raise BeadsNotFoundError(
                    f"Cannot read {beads_dir / DATA_SOURCE_FILES[DataSource.SQLITE]}: {e}",
                    path=beads_dir,
                ) from e
            logger.warning(f"Cannot read beads database ({e}); falling back to {jsonl_path}")

    return load_jsonl(beads_dir)
