#!/usr/bin/env python3
"""
Exceptions raised by the score job, the scheduler and the shuffle service.
"""

from typing import Optional


class CourseRankError(Exception):
    """Base exception for engine errors."""
    pass


class ScoreJobError(CourseRankError):
    """Failure scoped to a single course of a score job run."""

    def __init__(self, message: str, course_id: Optional[int] = None):
        super().__init__(message)
        self.course_id = course_id


class CourseDataFetchError(ScoreJobError):
    """Students or course tasks could not be loaded."""
    pass


class CourseTimeoutError(ScoreJobError):
    """The per-course deadline elapsed."""
    pass


class ScorePersistenceError(ScoreJobError):
    """The bulk score update for a course failed; nothing was committed."""

    def __init__(self, message: str, course_id: Optional[int] = None, attempted: int = 0):
        super().__init__(message, course_id=course_id)
        self.attempted = attempted


class JobAlreadyRunningError(CourseRankError):
    """A score job run is already in progress."""
    pass


class ShuffleError(CourseRankError):
    """Base exception for mentor shuffle failures."""
    pass


class CourseNotFoundError(ShuffleError):
    pass


class StageNotFoundError(ShuffleError):
    pass


class NoActiveMentorsError(ShuffleError):
    """The course has no mentor that is not expelled."""
    pass


class CourseTaskNotFoundError(ShuffleError):
    pass


class InvalidMentorError(ShuffleError):
    """A supplied mentor ordering names mentors that are not active in the course."""

    def __init__(self, message: str, mentor_ids=None):
        super().__init__(message)
        self.mentor_ids = list(mentor_ids or [])
