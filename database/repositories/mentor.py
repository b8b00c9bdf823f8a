import logging
from typing import List, Sequence, Tuple
from sqlalchemy import select, delete

from database.models import Mentor, TaskChecker
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MentorRepository(BaseRepository):
    def get_active_mentors(self, course_id: int) -> List[Mentor]:
        stmt = select(Mentor).where(
            Mentor.course_id == course_id,
            Mentor.is_expelled.is_(False)
        ).order_by(Mentor.created_date, Mentor.id)
        return self.db.execute(stmt).scalars().all()

    def replace_task_checkers(
        self,
        course_task_id: int,
        assignments: Sequence[Tuple[int, int]]
    ) -> int:
        """Drop the checkers of a course task and insert (student_id, mentor_id) pairs."""
        self.db.execute(
            delete(TaskChecker).where(TaskChecker.course_task_id == course_task_id)
        )
        for student_id, mentor_id in assignments:
            self.db.add(TaskChecker(
                student_id=student_id,
                mentor_id=mentor_id,
                course_task_id=course_task_id
            ))
        self.db.flush()

        logger.info(f"Assigned {len(assignments)} task checkers for course task {course_task_id}")
        return len(assignments)

    def get_task_checkers(self, course_task_id: int) -> List[TaskChecker]:
        stmt = select(TaskChecker).where(
            TaskChecker.course_task_id == course_task_id
        ).order_by(TaskChecker.student_id)
        return self.db.execute(stmt).scalars().all()
