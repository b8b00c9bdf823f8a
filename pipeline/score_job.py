"""Course score job.

Recomputes the weighted total score and the dense rank of every student of
every active course and writes back only the students that changed.

Courses are processed one after another. For each course the students (with
their results) and the course task weights are fetched concurrently, each on
its own unit of work. A failure in one course is logged and recorded in the
report; the next course is processed regardless.
"""

import time
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, ContextManager, List, Optional, Sequence, Tuple

from core.exceptions import (
    CourseRankError,
    CourseDataFetchError,
    CourseTimeoutError,
)
from core.scorer import (
    CourseTaskWeight,
    StudentScoreRow,
    RankInput,
    RankChange,
    StudentScoreUpdate,
    aggregate,
    build_weight_map,
    assign_ranks,
    build_score_updates,
    save_score_updates,
)

logger = logging.getLogger(__name__)

DEFAULT_COURSE_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class CourseRef:
    id: int
    name: str


@dataclass
class CourseScoreResult:
    """Outcome of scoring one course."""
    course_id: int
    course_name: str
    success: bool
    items_updated: int = 0
    duration_ms: int = 0
    error: Optional[str] = None


@dataclass
class ScoreJobReport:
    """Outcome of a whole run over the active courses."""
    started_at: datetime
    results: List[CourseScoreResult] = field(default_factory=list)
    execution_time: float = 0.0
    stopped: bool = False

    @property
    def items_updated(self) -> int:
        return sum(r.items_updated for r in self.results)

    @property
    def failed_courses(self) -> List[int]:
        return [r.course_id for r in self.results if not r.success]


def compute_score_changes(
    rows: Sequence[StudentScoreRow],
    course_tasks: Sequence[CourseTaskWeight]
) -> List[RankChange]:
    """Aggregate every student's results and rank the course once."""
    weights = build_weight_map(course_tasks)
    rank_inputs = [
        RankInput(
            id=row.id,
            current_rank=row.rank,
            current_total_score=row.total_score,
            new_total_score=aggregate(row.task_results, weights),
        )
        for row in rows
    ]
    return assign_ranks(rank_inputs)


class CourseScoreJob:
    """
    Runs the score recomputation over all active courses.

    Data access goes through uow_factory, a zero-argument callable returning
    a context manager that yields a SchoolRepository-like object
    (database.uow.school_uow in production).
    """

    def __init__(
        self,
        uow_factory: Callable[[], ContextManager],
        course_timeout_seconds: float = DEFAULT_COURSE_TIMEOUT_SECONDS,
        now_fn: Optional[Callable[[], datetime]] = None
    ):
        self.uow_factory = uow_factory
        self.course_timeout_seconds = course_timeout_seconds
        self.now_fn = now_fn or (lambda: datetime.now(timezone.utc))

    def list_courses(self) -> List[CourseRef]:
        with self.uow_factory() as repo:
            return [
                CourseRef(id=course.id, name=course.name)
                for course in repo.courses.list_active_courses()
            ]

    def run_all(self, stop_event: Optional[threading.Event] = None) -> ScoreJobReport:
        """Score every active course; per-course failures do not stop the run."""
        job_start = time.time()
        report = ScoreJobReport(started_at=self.now_fn())

        logger.info("=" * 60)
        logger.info("STARTING SCORE UPDATE JOB")
        logger.info("=" * 60)

        courses = self.list_courses()
        logger.info(f"Found {len(courses)} active courses")

        for course in courses:
            if stop_event is not None and stop_event.is_set():
                logger.info("Stop requested, skipping remaining courses")
                report.stopped = True
                break

            start = time.time()
            try:
                report.results.append(self.run_for_course(course.id, course.name))
            except Exception as e:
                duration_ms = int((time.time() - start) * 1000)
                logger.error(
                    f"Failed to update course score: course={course.name} (id={course.id}) "
                    f"duration={duration_ms}ms: {e}",
                    exc_info=True
                )
                report.results.append(CourseScoreResult(
                    course_id=course.id,
                    course_name=course.name,
                    success=False,
                    duration_ms=duration_ms,
                    error=str(e)
                ))

        report.execution_time = time.time() - job_start
        logger.info(
            f"Score update job completed in {report.execution_time:.2f}s: "
            f"{len(report.results)} courses, {report.items_updated} students updated, "
            f"{len(report.failed_courses)} failed"
        )
        return report

    def run_for_course(self, course_id: int, course_name: Optional[str] = None) -> CourseScoreResult:
        """Recompute and persist one course.

        Raises:
            CourseDataFetchError: loading students or tasks failed
            CourseTimeoutError: the per-course deadline elapsed
            ScorePersistenceError: the bulk update failed
        """
        name = course_name or str(course_id)
        start = time.time()
        deadline = time.monotonic() + self.course_timeout_seconds
        logger.info(f"Updating course score: course={name}")

        data_start = time.time()
        rows, course_tasks = self._load_course_data(course_id, deadline)
        logger.info(
            f"Loaded course score: course={name} students={len(rows)} tasks={len(course_tasks)} "
            f"duration={int((time.time() - data_start) * 1000)}ms"
        )

        changes = compute_score_changes(rows, course_tasks)
        updates: List[StudentScoreUpdate] = build_score_updates(changes, rows, now=self.now_fn())

        if time.monotonic() > deadline:
            raise CourseTimeoutError(
                f"Course {course_id} exceeded {self.course_timeout_seconds}s before persisting",
                course_id=course_id
            )

        items_updated = save_score_updates(self.uow_factory, course_id, updates)
        duration_ms = int((time.time() - start) * 1000)
        logger.info(
            f"Updated course score: course={name} items_updated={items_updated} "
            f"duration={duration_ms}ms"
        )
        return CourseScoreResult(
            course_id=course_id,
            course_name=name,
            success=True,
            items_updated=items_updated,
            duration_ms=duration_ms
        )

    def _load_course_data(
        self,
        course_id: int,
        deadline: float
    ) -> Tuple[List[StudentScoreRow], List[CourseTaskWeight]]:
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"course-{course_id}")
        try:
            students_future = executor.submit(self._fetch_students, course_id)
            tasks_future = executor.submit(self._fetch_course_tasks, course_id)
            page = students_future.result(timeout=self._remaining(deadline))
            course_tasks = tasks_future.result(timeout=self._remaining(deadline))
        except FuturesTimeoutError as e:
            raise CourseTimeoutError(
                f"Loading course {course_id} exceeded {self.course_timeout_seconds}s",
                course_id=course_id
            ) from e
        except CourseRankError:
            raise
        except Exception as e:
            raise CourseDataFetchError(
                f"Loading course {course_id} failed: {e}",
                course_id=course_id
            ) from e
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return list(page.content), list(course_tasks)

    def _fetch_students(self, course_id: int):
        with self.uow_factory() as repo:
            return repo.students.get_students_score(course_id)

    def _fetch_course_tasks(self, course_id: int):
        with self.uow_factory() as repo:
            return repo.course_tasks.get_course_tasks(course_id)

    @staticmethod
    def _remaining(deadline: float) -> float:
        return max(0.0, deadline - time.monotonic())
