from typing import List, Optional
from sqlalchemy import select

from core.scorer.models import CourseTaskWeight
from database.models import CourseTask, Stage
from database.repositories.base import BaseRepository


class CourseTaskRepository(BaseRepository):
    def get_course_tasks(self, course_id: int) -> List[CourseTaskWeight]:
        stmt = (
            select(CourseTask.id, CourseTask.score_weight)
            .join(Stage, CourseTask.stage_id == Stage.id)
            .where(Stage.course_id == course_id)
        )
        return [
            CourseTaskWeight(id=task_id, score_weight=weight)
            for task_id, weight in self.db.execute(stmt).all()
        ]

    def get_course_task(self, course_id: int, course_task_id: int) -> Optional[CourseTask]:
        stmt = (
            select(CourseTask)
            .join(Stage, CourseTask.stage_id == Stage.id)
            .where(
                CourseTask.id == course_task_id,
                Stage.course_id == course_id
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()
