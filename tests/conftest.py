"""
Pytest configuration and shared fixtures.

Provides fixtures for temp directories, sample issue records, datasets,
JSONL writers, isolated config and a mock subprocess.run.
"""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from beadboard.core.issues.loader import load_order, parse_dependency_records, parse_issue_record
from beadboard.core.issues.models import Dataset
from beadboard.core.issues.resolver import build_dataset

# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def project_dir(tmp_path):
    """
    Provide a temporary project directory with an empty .beads/ directory.
    """
    project = tmp_path / "project"
    (project / ".beads").mkdir(parents=True)
    return project


@pytest.fixture
def beads_dir(project_dir):
    """The project's .beads directory."""
    return project_dir / ".beads"


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """
    Raw JSONL issue records.

    Resolved shape:
    - bd-1 (epic, open, P3) is the parent of bd-2 and bd-3
    - bd-2 (open, P2) is blocked by bd-3 (in progress), so it shows as blocked
    - bd-4 (closed, P1) blocks bd-5, which is therefore not blocked
    """
    return [
        {
            "id": "bd-1",
            "title": "Auth epic",
            "status": "open",
            "priority": 3,
            "issue_type": "epic",
            "created_at": "2026-01-01T10:00:00Z",
        },
        {
            "id": "bd-2",
            "title": "Login form",
            "description": "Email and password fields",
            "status": "open",
            "priority": 2,
            "issue_type": "task",
            "assignee": "alice",
            "labels": ["frontend"],
            "created_at": "2026-01-02T10:00:00Z",
            "dependencies": [
                {"issue_id": "bd-2", "depends_on_id": "bd-1", "type": "parent-child"},
                {"issue_id": "bd-2", "depends_on_id": "bd-3", "type": "blocks"},
            ],
        },
        {
            "id": "bd-3",
            "title": "Session store",
            "status": "in_progress",
            "priority": 4,
            "issue_type": "feature",
            "assignee": "bob",
            "labels": ["backend"],
            "created_at": "2026-01-03T10:00:00Z",
            "dependencies": [
                {"issue_id": "bd-3", "depends_on_id": "bd-1", "type": "parent-child"},
            ],
        },
        {
            "id": "bd-4",
            "title": "Fix typo",
            "status": "closed",
            "priority": 1,
            "issue_type": "bug",
            "created_at": "2026-01-04T10:00:00Z",
            "closed_at": "2026-01-05T10:00:00Z",
        },
        {
            "id": "bd-5",
            "title": "Write docs",
            "status": "open",
            "priority": 2,
            "issue_type": "chore",
            "labels": ["docs", "frontend"],
            "created_at": "2026-01-05T10:00:00Z",
            "dependencies": [
                {"issue_id": "bd-5", "depends_on_id": "bd-4", "type": "blocks"},
            ],
        },
    ]


@pytest.fixture
def dataset_from_records() -> Callable[[list[dict[str, Any]]], Dataset]:
    """Build a resolved Dataset in memory from raw records."""

    def build(records: list[dict[str, Any]]) -> Dataset:
        issues = [parse_issue_record(record) for record in records]
        dependencies = [
            dep
            for record in records
            for dep in parse_dependency_records(record.get("dependencies"), record["id"])
        ]
        return build_dataset(load_order(issues), dependencies)

    return build


@pytest.fixture
def sample_dataset(dataset_from_records, sample_records) -> Dataset:
    """Resolved dataset of the sample records."""
    return dataset_from_records(sample_records)


# ==============================================================================
# File Fixtures
# ==============================================================================


@pytest.fixture
def write_jsonl(beads_dir) -> Callable[..., Path]:
    """
    Write records (or raw lines) to .beads/issues.jsonl.

    Usage:
        def test_something(write_jsonl):
            path = write_jsonl([{"id": "bd-1", "title": "A"}], extra_lines=["{bad"])
    """

    def write(records: list[Any], extra_lines: list[str] | None = None) -> Path:
        lines = [json.dumps(record) for record in records]
        lines.extend(extra_lines or [])
        path = beads_dir / "issues.jsonl"
        path.write_text("\n".join(lines) + "\n")
        return path

    return write


@pytest.fixture
def beads_issues_file(write_jsonl, sample_records):
    """Create a .beads/issues.jsonl file with the sample records."""
    return write_jsonl(sample_records)


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """
    Provide a clean environment without BEADBOARD_* env vars.
    """
    for key in list(os.environ.keys()):
        if key.startswith("BEADBOARD_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def isolated_config(clean_env, tmp_path, monkeypatch):
    """
    Point XDG_CONFIG_HOME at an empty temporary directory.

    Prevents tests from loading the real user config.
    """
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


# ==============================================================================
# Subprocess Fixtures
# ==============================================================================


@pytest.fixture
def mock_subprocess_run(monkeypatch):
    """
    Provide a mock for subprocess.run that records calls.

    Usage:
        def test_something(mock_subprocess_run):
            mock_subprocess_run.configure(stdout='{"id": "bd-9"}')
    """
    result = Mock()
    result.stdout = ""
    result.stderr = ""
    result.returncode = 0

    calls: list[list[str]] = []

    def configure(stdout="", stderr="", returncode=0):
        result.stdout = stdout
        result.stderr = stderr
        result.returncode = returncode
        return result

    def fake_run(cmd, *args, **kwargs):
        calls.append(list(cmd))
        return result

    result.configure = configure
    result.calls = calls

    import subprocess

    monkeypatch.setattr(subprocess, "run", fake_run)

    return result
