#!/usr/bin/env python3
"""
Mentor Shuffle Service - next-cycle mentor ordering when a stage closes.

Triggered synchronously by an administrative action. Errors are raised to
the caller as ShuffleError subclasses; there is no background retry.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, ContextManager, List, Optional, Sequence, Tuple

from core.exceptions import (
    CourseNotFoundError,
    StageNotFoundError,
    CourseTaskNotFoundError,
    NoActiveMentorsError,
    InvalidMentorError,
)
from core.shuffle.policies import MentorRef, ShufflePolicy, RandomShufflePolicy

logger = logging.getLogger(__name__)


@dataclass
class StageCloseResult:
    course_id: int
    stage_id: int
    mentor_ids_next: List[int] = field(default_factory=list)


def plan_task_checkers(
    students: Sequence[Tuple[int, Optional[int]]],
    mentor_ids: Sequence[int]
) -> List[Tuple[int, int]]:
    """Pick a reviewing mentor for every student.

    A student of the mentor at position i is checked by the mentor at
    position (i + 1) % n, so nobody reviews their own mentee while there
    is more than one mentor. Students without an active mentor are spread
    round-robin over the ordering.

    Args:
        students: (student_id, mentor_id or None) pairs
        mentor_ids: Next-cycle mentor ordering

    Returns:
        (student_id, checker_mentor_id) pairs in student order
    """
    if not mentor_ids:
        return []

    position = {mentor_id: i for i, mentor_id in enumerate(mentor_ids)}
    count = len(mentor_ids)
    plan = []
    unassigned = 0
    for student_id, mentor_id in students:
        if mentor_id in position:
            checker_id = mentor_ids[(position[mentor_id] + 1) % count]
        else:
            checker_id = mentor_ids[unassigned % count]
            unassigned += 1
        plan.append((student_id, checker_id))
    return plan


class MentorShuffleService:
    """
    Produces mentor orderings for a course through an injectable policy.
    """

    def __init__(
        self,
        uow_factory: Callable[[], ContextManager],
        policy: Optional[ShufflePolicy] = None
    ):
        self.uow_factory = uow_factory
        self.policy = policy or RandomShufflePolicy()

    def shuffle(self, course_id: int) -> List[int]:
        with self.uow_factory() as repo:
            return self._shuffle(repo, course_id)

    def close_stage(self, course_id: int, stage_id: int) -> StageCloseResult:
        """Mark the stage closed and compute the next mentor ordering.

        Both happen in one unit of work: if the shuffle fails the stage
        stays open.
        """
        logger.info(f"Closing stage {stage_id} of course {course_id}")
        with self.uow_factory() as repo:
            stage = repo.courses.get_stage(course_id, stage_id)
            if stage is None:
                raise StageNotFoundError(f"Stage {stage_id} not found in course {course_id}")
            repo.courses.close_stage(stage)
            mentor_ids_next = self._shuffle(repo, course_id)

        return StageCloseResult(
            course_id=course_id,
            stage_id=stage_id,
            mentor_ids_next=mentor_ids_next
        )

    def assign_task_checkers(
        self,
        course_id: int,
        course_task_id: int,
        mentor_ids: Optional[Sequence[int]] = None
    ) -> List[Tuple[int, int]]:
        """Replace the checkers of a course task using a mentor ordering.

        A fresh ordering is shuffled when none is given.
        """
        with self.uow_factory() as repo:
            if repo.course_tasks.get_course_task(course_id, course_task_id) is None:
                raise CourseTaskNotFoundError(
                    f"Course task {course_task_id} not found in course {course_id}"
                )
            if mentor_ids is None:
                mentor_ids = self._shuffle(repo, course_id)
            elif not mentor_ids:
                raise NoActiveMentorsError(f"No mentors given for course {course_id}")
            else:
                self._check_mentor_order(repo, course_id, mentor_ids)

            students = [
                (student.id, student.mentor_id)
                for student in repo.students.get_active_students(course_id)
            ]
            plan = plan_task_checkers(students, list(mentor_ids))
            repo.mentors.replace_task_checkers(course_task_id, plan)

        logger.info(
            f"Course {course_id} task {course_task_id}: {len(plan)} students "
            f"distributed over {len(mentor_ids)} mentors"
        )
        return plan

    def _check_mentor_order(self, repo, course_id: int, mentor_ids: Sequence[int]) -> None:
        """Every id must be an active mentor of the course, each given once."""
        active = {mentor.id for mentor in repo.mentors.get_active_mentors(course_id)}
        unknown = [mentor_id for mentor_id in mentor_ids if mentor_id not in active]
        if unknown:
            raise InvalidMentorError(
                f"Mentors {unknown} are not active mentors of course {course_id}",
                mentor_ids=unknown
            )
        if len(set(mentor_ids)) != len(mentor_ids):
            raise InvalidMentorError(
                f"Mentor ordering for course {course_id} repeats a mentor",
                mentor_ids=mentor_ids
            )

    def _shuffle(self, repo, course_id: int) -> List[int]:
        if repo.courses.get_by_id(course_id) is None:
            raise CourseNotFoundError(f"Course {course_id} not found")

        mentors = [
            MentorRef(id=m.id, name=m.name, max_students_limit=m.max_students_limit)
            for m in repo.mentors.get_active_mentors(course_id)
        ]
        if not mentors:
            raise NoActiveMentorsError(f"Course {course_id} has no active mentors")

        ordered = self.policy.shuffle(mentors)
        logger.info(
            f"Shuffled {len(ordered)} mentors for course {course_id} "
            f"with {self.policy.__class__.__name__}"
        )
        return ordered
