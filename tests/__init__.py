#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    uv run python -m pytest tests/ -v

    # Skip tests that need a database (SQLite fixtures)
    uv run python -m pytest tests/ -v -m "not db"

    # Using unittest (pytest-style fixture tests are not collected)
    uv run python -m unittest discover tests -v

Database tests run against a temporary file-backed SQLite database created
from database.models; no external server is needed.
"""

from datetime import datetime, timezone

from core.scorer.models import StudentScoreRow, TaskResultRow


def make_row(student_id, rank, total_score, results=(), change_date=None):
    """Build a StudentScoreRow from (course_task_id, score) pairs."""
    return StudentScoreRow(
        id=student_id,
        rank=rank,
        total_score=total_score,
        total_score_change_date=change_date,
        task_results=[TaskResultRow(course_task_id=t, score=s) for t, s in results],
    )


FIXED_NOW = datetime(2024, 3, 1, 1, 0, tzinfo=timezone.utc)
