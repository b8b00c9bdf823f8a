#!/usr/bin/env python3
"""
Rank Assignment - dense 1..N ranking of a course by total score.

Students are ordered by descending new total score. Equal scores keep the
relative order they had in the input, made explicit through the original
index as secondary sort key.

Only "dirty" students are returned: those whose score or rank differs from
the persisted values. Re-running over an unchanged course yields nothing.
"""

import logging
from typing import List, Sequence

from core.scorer.models import RankInput, RankChange

logger = logging.getLogger(__name__)


def order_by_score(students: Sequence[RankInput]) -> List[RankInput]:
    """Descending by new_total_score, ties in input order."""
    indexed = sorted(
        enumerate(students),
        key=lambda pair: (-pair[1].new_total_score, pair[0])
    )
    return [student for _, student in indexed]


def assign_ranks(students: Sequence[RankInput]) -> List[RankChange]:
    changes = []
    for index, student in enumerate(order_by_score(students)):
        new_rank = index + 1
        score_changed = student.new_total_score != student.current_total_score
        rank_changed = new_rank != student.current_rank
        if not (score_changed or rank_changed):
            continue
        changes.append(RankChange(
            id=student.id,
            new_rank=new_rank,
            new_total_score=student.new_total_score,
            score_changed=score_changed,
            rank_changed=rank_changed,
        ))

    logger.debug(f"Ranked {len(students)} students, {len(changes)} changed")
    return changes
