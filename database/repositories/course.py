import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select

from database.models import Course, Stage
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class CourseRepository(BaseRepository):
    def list_active_courses(self) -> List[Course]:
        stmt = select(Course).where(
            Course.completed.is_(False)
        ).order_by(Course.id)
        return self.db.execute(stmt).scalars().all()

    def get_by_id(self, course_id: int) -> Optional[Course]:
        return self.db.get(Course, course_id)

    def get_stage(self, course_id: int, stage_id: int) -> Optional[Stage]:
        stmt = select(Stage).where(
            Stage.id == stage_id,
            Stage.course_id == course_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def close_stage(self, stage: Stage) -> Stage:
        if stage.status != 'closed':
            stage.status = 'closed'
            stage.closed_date = datetime.now(timezone.utc)
            logger.info(f"Closed stage {stage.id} of course {stage.course_id}")
        return stage
