#!/usr/bin/env python3
"""
Scoring Models - Typed records exchanged between the repositories and
the aggregation / ranking / persistence steps of the course score job.
"""

from datetime import datetime
from typing import List, Optional
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TaskResultRow:
    """A raw per-task score of one student."""
    course_task_id: int
    score: float


@dataclass(frozen=True)
class CourseTaskWeight:
    """Score weight of a course task."""
    id: int
    score_weight: Optional[float] = 1.0


@dataclass
class StudentScoreRow:
    """Persisted score snapshot of a student plus the results it derives from."""
    id: int
    rank: int
    total_score: float
    total_score_change_date: Optional[datetime] = None
    task_results: List[TaskResultRow] = field(default_factory=list)


@dataclass
class StudentScorePage:
    """Result envelope returned by the student repository."""
    content: List[StudentScoreRow] = field(default_factory=list)


@dataclass(frozen=True)
class RankInput:
    """Current persisted rank/score of a student and the freshly computed score."""
    id: int
    current_rank: int
    current_total_score: float
    new_total_score: float


@dataclass(frozen=True)
class RankChange:
    """A dirty student: its score and/or rank differs from the persisted one."""
    id: int
    new_rank: int
    new_total_score: float
    score_changed: bool
    rank_changed: bool


@dataclass(frozen=True)
class StudentScoreUpdate:
    """Row written back to the student table."""
    id: int
    total_score: float
    rank: int
    total_score_change_date: Optional[datetime]
