"""Score job execution modules for CourseRank."""

from .score_job import CourseScoreJob, CourseScoreResult, ScoreJobReport
from .scheduler import DailyScheduler, SchedulerState

__all__ = [
    'CourseScoreJob',
    'CourseScoreResult',
    'ScoreJobReport',
    'DailyScheduler',
    'SchedulerState',
]
