import logging
from typing import List, Sequence
from sqlalchemy import select, update
from sqlalchemy.orm import selectinload

from core.scorer.models import StudentScorePage, StudentScoreRow, StudentScoreUpdate, TaskResultRow
from database.models import Student
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class StudentRepository(BaseRepository):
    def get_students_score(self, course_id: int) -> StudentScorePage:
        """Students of a course with task and interview results.

        Rows come in the current standing order (score desc, then persisted
        rank), which is the order equal new scores keep when re-ranked.
        """
        stmt = (
            select(Student)
            .where(Student.course_id == course_id)
            .options(
                selectinload(Student.task_results),
                selectinload(Student.task_interview_results)
            )
            .order_by(Student.total_score.desc(), Student.rank.asc(), Student.id.asc())
        )
        students = self.db.execute(stmt).scalars().all()

        content = []
        for student in students:
            results = [
                TaskResultRow(course_task_id=r.course_task_id, score=float(r.score))
                for r in student.task_results
            ]
            results.extend(
                TaskResultRow(
                    course_task_id=r.course_task_id,
                    score=float(r.score) if r.score is not None else 0.0
                )
                for r in student.task_interview_results
            )
            content.append(StudentScoreRow(
                id=student.id,
                rank=student.rank,
                total_score=float(student.total_score),
                total_score_change_date=student.total_score_change_date,
                task_results=results,
            ))
        return StudentScorePage(content=content)

    def update_score_students(self, updates: Sequence[StudentScoreUpdate]) -> int:
        if not updates:
            return 0

        self.db.execute(
            update(Student),
            [
                {
                    'id': u.id,
                    'total_score': u.total_score,
                    'rank': u.rank,
                    'total_score_change_date': u.total_score_change_date,
                }
                for u in updates
            ]
        )
        logger.debug(f"Bulk updated scores of {len(updates)} students")
        return len(updates)

    def get_active_students(self, course_id: int) -> List[Student]:
        stmt = select(Student).where(
            Student.course_id == course_id,
            Student.is_expelled.is_(False),
            Student.is_failed.is_(False)
        ).order_by(Student.id)
        return self.db.execute(stmt).scalars().all()
