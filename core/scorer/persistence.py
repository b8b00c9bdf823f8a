#!/usr/bin/env python3
"""
Persistence Operations - writes score deltas back to the student table.

Only dirty students reach this module. The change date is bumped only when
the total score itself changed; a rank-only change keeps the previous date.
The whole course is written in one unit of work, so a failure leaves the
course untouched.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, ContextManager, Dict, List, Optional, Sequence

from core.exceptions import ScorePersistenceError
from core.scorer.models import RankChange, StudentScoreRow, StudentScoreUpdate

logger = logging.getLogger(__name__)


def build_score_updates(
    changes: Sequence[RankChange],
    rows: Sequence[StudentScoreRow],
    now: Optional[datetime] = None
) -> List[StudentScoreUpdate]:
    """Turn rank changes into rows to persist.

    Args:
        changes: Dirty students from assign_ranks()
        rows: The snapshot the changes were computed from (prior change dates)
        now: Timestamp for students whose score changed

    Returns:
        One StudentScoreUpdate per change, in the same order
    """
    if now is None:
        now = datetime.now(timezone.utc)

    prior_dates: Dict[int, Optional[datetime]] = {
        row.id: row.total_score_change_date for row in rows
    }

    return [
        StudentScoreUpdate(
            id=change.id,
            total_score=change.new_total_score,
            rank=change.new_rank,
            total_score_change_date=now if change.score_changed else prior_dates.get(change.id),
        )
        for change in changes
    ]


def save_score_updates(
    uow_factory: Callable[[], ContextManager],
    course_id: int,
    updates: Sequence[StudentScoreUpdate]
) -> int:
    """Bulk-update the students of one course inside a single transaction.

    Returns:
        Number of rows written

    Raises:
        ScorePersistenceError: if the write or the commit failed
    """
    if not updates:
        return 0

    try:
        with uow_factory() as repo:
            repo.students.update_score_students(updates)
    except Exception as e:
        logger.error(
            f"Failed to persist {len(updates)} score updates for course {course_id}: {e}",
            exc_info=True
        )
        raise ScorePersistenceError(
            f"Persisting {len(updates)} score updates failed: {e}",
            course_id=course_id,
            attempted=len(updates)
        ) from e

    return len(updates)
