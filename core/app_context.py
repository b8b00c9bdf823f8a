from dataclasses import dataclass
from typing import Callable, ContextManager, Optional

from core.config_loader import AppConfig
from core.shuffle import MentorShuffleService, build_policy
from pipeline.control import JobRunLock
from pipeline.scheduler import DailyScheduler
from pipeline.score_job import CourseScoreJob


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Services receive a unit-of-work factory instead of a session; each
    operation opens its own transaction through it.
    """
    config: AppConfig
    score_job: CourseScoreJob
    scheduler: DailyScheduler
    shuffle_service: MentorShuffleService

    @classmethod
    def build(
        cls,
        config: AppConfig,
        uow_factory: Optional[Callable[[], ContextManager]] = None
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            uow_factory: Unit-of-work factory; defaults to database.uow.school_uow

        Returns:
            Fully wired AppContext instance (scheduler not started)
        """
        if uow_factory is None:
            from database.uow import school_uow
            uow_factory = school_uow

        score_job = CourseScoreJob(
            uow_factory=uow_factory,
            course_timeout_seconds=config.schedule.course_timeout_seconds
        )

        scheduler = cls._build_scheduler(config, score_job)

        shuffle_service = MentorShuffleService(
            uow_factory=uow_factory,
            policy=build_policy(config.shuffle)
        )

        return cls(
            config=config,
            score_job=score_job,
            scheduler=scheduler,
            shuffle_service=shuffle_service
        )

    @staticmethod
    def _build_scheduler(config: AppConfig, score_job: CourseScoreJob) -> DailyScheduler:
        """Build the daily scheduler, with a file lock if one is configured."""
        schedule = config.schedule
        run_lock = JobRunLock(schedule.lock_file) if schedule.lock_file else None

        return DailyScheduler(
            job=score_job.run_all,
            run_at=schedule.run_at_time,
            run_lock=run_lock
        )
