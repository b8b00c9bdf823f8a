#!/usr/bin/env python3
"""
Score Aggregation - weighted total score of a student.

total = round(sum(score * weight(course_task_id)), 1)

A task that is missing from the weight map (deleted, or belonging to another
course) gets weight 1.0, i.e. full unweighted credit.
"""

from decimal import Decimal, ROUND_HALF_UP, ROUND_HALF_DOWN
from typing import Dict, Iterable, Mapping

from core.scorer.models import TaskResultRow, CourseTaskWeight

DEFAULT_WEIGHT = 1.0

_ONE_DECIMAL = Decimal('0.1')


def round_score(value: float) -> float:
    """Round to one decimal place, halves towards positive infinity.

    Goes through the shortest repr of the float so that e.g. 1.05 rounds to
    1.1 rather than to 1.0 as its binary representation would suggest.
    A negative half rounds towards zero: -1.05 becomes -1.0.
    """
    exact = Decimal(repr(float(value)))
    rounding = ROUND_HALF_UP if exact >= 0 else ROUND_HALF_DOWN
    return float(exact.quantize(_ONE_DECIMAL, rounding=rounding))


def build_weight_map(course_tasks: Iterable[CourseTaskWeight]) -> Dict[int, float]:
    """Map course task id to its score weight (NULL weight means the column default)."""
    return {
        task.id: float(task.score_weight) if task.score_weight is not None else DEFAULT_WEIGHT
        for task in course_tasks
    }


def aggregate(task_results: Iterable[TaskResultRow], weights: Mapping[int, float]) -> float:
    total = sum(
        result.score * weights.get(result.course_task_id, DEFAULT_WEIGHT)
        for result in task_results
    )
    return round_score(total)
