"""
Tests for loading datasets from .beads/ (JSONL and SQLite) and for
beads directory discovery.
"""

import logging
import sqlite3

import pytest

from beadboard.core.issues.exceptions import BeadsNotFoundError, IssueParseError
from beadboard.core.issues.loader import (
    load_dataset,
    load_jsonl,
    load_order,
    load_sqlite,
    parse_dependency_records,
    parse_issue_record,
)
from beadboard.core.issues.models import DataSource, DependencyType, Issue, IssueStatus
from beadboard.utils.project import find_beads_dir, get_beads_dir, get_data_source


def create_db(path, issues, labels=(), dependencies=(), with_optional_tables=True):
    """Create a minimal beads.db with the given rows."""
    with sqlite3.connect(path) as conn:
        conn.execute(
            "CREATE TABLE issues (id TEXT PRIMARY KEY, title TEXT, description TEXT, "
            "status TEXT, priority INTEGER, issue_type TEXT, assignee TEXT, "
            "created_at TEXT, updated_at TEXT, closed_at TEXT)"
        )
        conn.executemany(
            "INSERT INTO issues (id, title, status, priority, issue_type, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            issues,
        )
        if with_optional_tables:
            conn.execute("CREATE TABLE labels (issue_id TEXT, label TEXT)")
            conn.executemany("INSERT INTO labels VALUES (?, ?)", labels)
            conn.execute("CREATE TABLE dependencies (issue_id TEXT, depends_on_id TEXT, type TEXT)")
            conn.executemany("INSERT INTO dependencies VALUES (?, ?, ?)", dependencies)
    conn.close()


class TestParseRecords:
    """Tests for record-level parsing."""

    def test_parse_issue_record(self):
        issue = parse_issue_record({"id": "bd-1", "title": "A", "dependencies": [{"x": 1}]})
        assert issue.id == "bd-1"

    def test_parse_issue_record_rejects_non_object(self):
        with pytest.raises(IssueParseError, match="Line 4: expected JSON object"):
            parse_issue_record(["bd-1"], line_num=4)

    def test_parse_issue_record_validation_error(self):
        with pytest.raises(IssueParseError) as exc_info:
            parse_issue_record({"id": "bd-1", "priority": 9}, line_num=2)

        assert exc_info.value.line_num == 2
        assert "invalid issue bd-1" in str(exc_info.value)
        assert "priority" in str(exc_info.value)

    def test_parse_dependency_records(self):
        """Test embedded edges default issue_id and type, and drop bad entries."""
        edges = parse_dependency_records(
            [
                {"depends_on_id": "bd-2"},
                {"issue_id": "bd-1", "depends_on_id": "bd-3", "type": "parent-child"},
                {"issue_id": "bd-1", "depends_on_id": "bd-4", "type": "nonsense"},
                "not-a-dict",
            ],
            "bd-1",
        )

        assert [(e.issue_id, e.depends_on_id, e.type) for e in edges] == [
            ("bd-1", "bd-2", DependencyType.BLOCKS),
            ("bd-1", "bd-3", DependencyType.PARENT_CHILD),
        ]

    def test_parse_dependency_records_not_a_list(self):
        assert parse_dependency_records(None, "bd-1") == []

    def test_load_order(self):
        """Test load order is priority desc, then created desc."""
        issues = [
            Issue(id="old-p2", priority=2, created_at="2026-01-01T00:00:00Z"),
            Issue(id="p4", priority=4, created_at="2026-01-01T00:00:00Z"),
            Issue(id="new-p2", priority=2, created_at="2026-02-01T00:00:00Z"),
        ]
        assert [issue.id for issue in load_order(issues)] == ["p4", "new-p2", "old-p2"]


class TestLoadJsonl:
    """Tests for the JSONL loader."""

    def test_loads_sample(self, beads_dir, beads_issues_file):
        dataset = load_jsonl(beads_dir)

        assert dataset.data_source == DataSource.JSONL
        assert [issue.id for issue in dataset.issues] == ["bd-3", "bd-1", "bd-5", "bd-2", "bd-4"]
        assert dataset.get("bd-2").blocked_by == ["bd-3"]
        assert dataset.get("bd-1").children == ["bd-2", "bd-3"]

    def test_malformed_lines_skipped(self, beads_dir, write_jsonl, caplog):
        """Test bad lines are skipped with a warning and the rest still load."""
        write_jsonl(
            [{"id": "bd-1", "title": "Good"}],
            extra_lines=["{not json", "[1, 2]", '{"id": "bd-2", "priority": 7}', "", "   "],
        )

        with caplog.at_level(logging.WARNING):
            dataset = load_jsonl(beads_dir)

        assert [issue.id for issue in dataset.issues] == ["bd-1"]
        assert "Line 2: invalid JSON" in caplog.text
        assert "Line 3: expected JSON object" in caplog.text
        assert "Line 4: invalid issue bd-2" in caplog.text

    def test_undecodable_line_skipped(self, beads_dir, caplog):
        """Test a line of invalid UTF-8 is skipped like any other bad record."""
        path = beads_dir / "issues.jsonl"
        path.write_bytes(
            b'{"id": "bd-1", "title": "Good"}\n'
            b'{"id": "bd-2", "title": "\xff\xfe broken"}\n'
            b'{"id": "bd-3", "title": "Caf\xc3\xa9"}\n'
        )

        with caplog.at_level(logging.WARNING):
            dataset = load_jsonl(beads_dir)

        assert sorted(issue.id for issue in dataset.issues) == ["bd-1", "bd-3"]
        assert dataset.get("bd-3").title == "Café"
        assert "Line 2: invalid UTF-8" in caplog.text

    def test_undecodable_line_through_load_dataset(self, beads_dir):
        (beads_dir / "issues.jsonl").write_bytes(b'{"id": "bd-1"}\n\xff\xfe\n')

        assert [issue.id for issue in load_dataset(beads_dir).issues] == ["bd-1"]

    def test_comments_and_extras(self, beads_dir, write_jsonl):
        write_jsonl(
            [
                {
                    "id": "bd-1",
                    "title": "With extras",
                    "design": "Use a queue",
                    "estimated_minutes": 30,
                    "comments": [
                        {"id": 1, "issue_id": "bd-1", "author": "alice", "text": "LGTM"}
                    ],
                }
            ]
        )

        issue = load_jsonl(beads_dir).get("bd-1")

        assert issue.design == "Use a queue"
        assert issue.estimated_minutes == 30
        assert issue.comments[0].author == "alice"

    def test_unreadable_file(self, beads_dir):
        with pytest.raises(BeadsNotFoundError):
            load_jsonl(beads_dir)


class TestLoadSqlite:
    """Tests for the SQLite loader."""

    def test_loads_issues_labels_and_dependencies(self, beads_dir):
        create_db(
            beads_dir / "beads.db",
            issues=[
                ("bd-1", "Epic", "open", 3, "epic", "2026-01-01T00:00:00Z"),
                ("bd-2", "Task", "open", 2, "task", "2026-01-02T00:00:00Z"),
                ("bd-3", "Blocker", "in_progress", 4, "bug", "2026-01-03T00:00:00Z"),
            ],
            labels=[("bd-2", "ui"), ("bd-2", "urgent")],
            dependencies=[("bd-2", "bd-1", "parent-child"), ("bd-2", "bd-3", "blocks")],
        )

        dataset = load_sqlite(beads_dir)

        assert dataset.data_source == DataSource.SQLITE
        assert [issue.id for issue in dataset.issues] == ["bd-3", "bd-1", "bd-2"]
        task = dataset.get("bd-2")
        assert task.labels == ["ui", "urgent"]
        assert task.parent == "bd-1"
        assert task.effective_status == IssueStatus.BLOCKED
        assert task.description == ""

    def test_missing_optional_tables(self, beads_dir):
        """Test databases without labels/dependencies tables still load."""
        create_db(
            beads_dir / "beads.db",
            issues=[("bd-1", "Only", "open", 2, "task", None)],
            with_optional_tables=False,
        )

        dataset = load_sqlite(beads_dir)

        assert [issue.id for issue in dataset.issues] == ["bd-1"]
        assert dataset.dependencies == []

    def test_invalid_rows_skipped(self, beads_dir, caplog):
        create_db(
            beads_dir / "beads.db",
            issues=[
                ("bd-1", "Good", "open", 2, "task", None),
                ("bd-2", "Bad status", "archived", 2, "task", None),
            ],
        )

        with caplog.at_level(logging.WARNING):
            dataset = load_sqlite(beads_dir)

        assert [issue.id for issue in dataset.issues] == ["bd-1"]
        assert "bd-2" in caplog.text


class TestLoadDataset:
    """Tests for load_dataset source selection and errors."""

    def test_prefers_sqlite(self, beads_dir, beads_issues_file):
        create_db(beads_dir / "beads.db", issues=[("db-1", "From db", "open", 2, "task", None)])

        dataset = load_dataset(beads_dir)

        assert dataset.data_source == DataSource.SQLITE
        assert [issue.id for issue in dataset.issues] == ["db-1"]

    def test_falls_back_to_jsonl_when_db_corrupt(self, beads_dir, beads_issues_file, caplog):
        (beads_dir / "beads.db").write_bytes(b"this is not a database" * 100)

        with caplog.at_level(logging.WARNING):
            dataset = load_dataset(beads_dir)

        assert dataset.data_source == DataSource.JSONL
        assert dataset.stats.total == 5
        assert "falling back" in caplog.text

    def test_corrupt_db_without_jsonl(self, beads_dir):
        (beads_dir / "beads.db").write_bytes(b"this is not a database" * 100)

        with pytest.raises(BeadsNotFoundError):
            load_dataset(beads_dir)

    def test_no_data_source(self, beads_dir):
        with pytest.raises(BeadsNotFoundError, match="No data source"):
            load_dataset(beads_dir)

    def test_searches_upward_by_default(self, project_dir, beads_issues_file, monkeypatch):
        nested = project_dir / "src" / "pkg"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert load_dataset().stats.total == 5


class TestBeadsDirDiscovery:
    """Tests for find_beads_dir / get_beads_dir / get_data_source."""

    def test_get_data_source(self, beads_dir, beads_issues_file):
        assert get_data_source(beads_dir) == DataSource.JSONL

        (beads_dir / "beads.db").write_bytes(b"")
        assert get_data_source(beads_dir) == DataSource.SQLITE

    def test_get_data_source_empty(self, beads_dir):
        assert get_data_source(beads_dir) is None

    def test_find_walks_upward(self, project_dir, beads_issues_file):
        nested = project_dir / "a" / "b"
        nested.mkdir(parents=True)

        assert find_beads_dir(nested) == (project_dir / ".beads").resolve()

    def test_empty_beads_dir_does_not_hide_parent(self, project_dir, beads_issues_file):
        """Test a .beads/ without data in a subdirectory is skipped."""
        nested = project_dir / "sub"
        (nested / ".beads").mkdir(parents=True)

        assert find_beads_dir(nested) == (project_dir / ".beads").resolve()

    def test_get_beads_dir_raises(self, tmp_path):
        with pytest.raises(BeadsNotFoundError) as exc_info:
            get_beads_dir(tmp_path)

        assert exc_info.value.path == tmp_path.resolve()
