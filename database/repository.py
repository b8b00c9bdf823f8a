import logging

from sqlalchemy.orm import Session

from database.repositories import (
    CourseRepository,
    StudentRepository,
    CourseTaskRepository,
    MentorRepository,
)

logger = logging.getLogger(__name__)


class SchoolRepository:
    """Groups the per-entity repositories that share one Session."""

    def __init__(self, db: Session):
        self.db = db
        self.courses = CourseRepository(db)
        self.students = StudentRepository(db)
        self.course_tasks = CourseTaskRepository(db)
        self.mentors = MentorRepository(db)
