#!/usr/bin/env python3
"""
Repository tests against a temporary SQLite database.
"""

from datetime import datetime

import pytest

from core.scorer import StudentScoreUpdate, TaskResultRow
from database.models import (
    Course, Stage, CourseTask, Student, Mentor, TaskResult, TaskInterviewResult, TaskChecker
)
from database.repository import SchoolRepository

pytestmark = pytest.mark.db


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(session):
    return SchoolRepository(session)


@pytest.fixture
def course(session):
    course = Course(id=1, name="JS 2024")
    other = Course(id=2, name="Node 2023", completed=True)
    session.add_all([course, other])
    session.add_all([
        Stage(id=10, course_id=1, name="Stage 1"),
        Stage(id=20, course_id=2, name="Old stage"),
    ])
    session.add_all([
        CourseTask(id=100, stage_id=10, name="Fizzbuzz", score_weight=0.5),
        CourseTask(id=101, stage_id=10, name="Interview", score_weight=2),
        CourseTask(id=200, stage_id=20, name="Other course task", score_weight=3),
    ])
    session.commit()
    return course


def test_list_active_courses_skips_completed(repo, course):
    assert [c.id for c in repo.courses.list_active_courses()] == [1]


def test_get_stage_scoped_to_course(repo, course):
    assert repo.courses.get_stage(1, 10).name == "Stage 1"
    assert repo.courses.get_stage(1, 20) is None


def test_close_stage(repo, session, course):
    stage = repo.courses.get_stage(1, 10)
    repo.courses.close_stage(stage)
    session.commit()

    assert repo.courses.get_stage(1, 10).status == 'closed'
    assert repo.courses.get_stage(1, 10).closed_date is not None


def test_get_course_tasks_only_for_course(repo, course):
    tasks = {t.id: t.score_weight for t in repo.course_tasks.get_course_tasks(1)}

    assert tasks == {100: 0.5, 101: 2.0}


def test_get_students_score_merges_interview_results(repo, session, course):
    session.add_all([
        Student(id=1, course_id=1, total_score=10, rank=2),
        Student(id=2, course_id=1, total_score=30, rank=1),
        Student(id=3, course_id=2, total_score=99, rank=1),
    ])
    session.add_all([
        TaskResult(student_id=1, course_task_id=100, score=40),
        TaskInterviewResult(student_id=1, course_task_id=101, score=None),
        TaskInterviewResult(student_id=2, course_task_id=101, score=5),
    ])
    session.commit()

    page = repo.students.get_students_score(1)

    assert [row.id for row in page.content] == [2, 1]
    rows = {row.id: row for row in page.content}
    assert rows[1].task_results == [TaskResultRow(100, 40.0), TaskResultRow(101, 0.0)]
    assert rows[2].task_results == [TaskResultRow(101, 5.0)]
    assert rows[2].rank == 1
    assert rows[2].total_score == 30.0


def test_students_with_equal_scores_ordered_by_rank(repo, session, course):
    session.add_all([
        Student(id=1, course_id=1, total_score=10, rank=3),
        Student(id=2, course_id=1, total_score=10, rank=2),
    ])
    session.commit()

    assert [row.id for row in repo.students.get_students_score(1).content] == [2, 1]


def test_update_score_students(repo, session, course):
    session.add_all([
        Student(id=1, course_id=1, total_score=10, rank=2),
        Student(id=2, course_id=1, total_score=30, rank=1),
    ])
    session.commit()
    changed_at = datetime(2024, 3, 1, 1, 0)

    repo.students.update_score_students([
        StudentScoreUpdate(id=1, total_score=45.5, rank=1, total_score_change_date=changed_at),
    ])
    session.commit()
    session.expire_all()

    first = session.get(Student, 1)
    assert (first.total_score, first.rank) == (45.5, 1)
    assert first.total_score_change_date.replace(tzinfo=None) == changed_at
    assert session.get(Student, 2).total_score == 30


def test_active_mentors_and_students(repo, session, course):
    session.add_all([
        Mentor(id=1, course_id=1, name="a", created_date=datetime(2024, 1, 2)),
        Mentor(id=2, course_id=1, name="b", created_date=datetime(2024, 1, 1)),
        Mentor(id=3, course_id=1, name="c", is_expelled=True),
        Mentor(id=4, course_id=2, name="d"),
    ])
    session.add_all([
        Student(id=1, course_id=1, mentor_id=1),
        Student(id=2, course_id=1, is_expelled=True),
        Student(id=3, course_id=1, is_failed=True),
        Student(id=4, course_id=1),
    ])
    session.commit()

    assert [m.id for m in repo.mentors.get_active_mentors(1)] == [2, 1]
    assert [s.id for s in repo.students.get_active_students(1)] == [1, 4]


def test_replace_task_checkers(repo, session, course):
    session.add_all([Mentor(id=1, course_id=1, name="a"), Mentor(id=2, course_id=1, name="b")])
    session.add_all([Student(id=1, course_id=1), Student(id=2, course_id=1)])
    session.add(TaskChecker(mentor_id=1, student_id=1, course_task_id=100))
    session.commit()

    repo.mentors.replace_task_checkers(100, [(1, 2), (2, 1)])
    session.commit()

    checkers = repo.mentors.get_task_checkers(100)
    assert [(c.student_id, c.mentor_id) for c in checkers] == [(1, 2), (2, 1)]
    assert session.query(TaskChecker).count() == 2
