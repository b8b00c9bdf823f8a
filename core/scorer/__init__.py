#!/usr/bin/env python3
"""
Scoring Module - weighted totals, dense ranks and score deltas.

Public API:
- aggregate / build_weight_map: weighted total score of a student
- assign_ranks: dense ranking with dirty-only output
- build_score_updates / save_score_updates: delta persistence

Split into focused modules:

- models.py: Typed records (rows, rank inputs/changes, updates)
- aggregator.py: Weighted sum with one-decimal half-up rounding
- ranking.py: Stable descending ordering and change detection
- persistence.py: Change-date handling and the bulk write
"""

from core.scorer.models import (
    TaskResultRow,
    CourseTaskWeight,
    StudentScoreRow,
    StudentScorePage,
    RankInput,
    RankChange,
    StudentScoreUpdate,
)
from core.scorer.aggregator import aggregate, build_weight_map, round_score
from core.scorer.ranking import assign_ranks
from core.scorer.persistence import build_score_updates, save_score_updates

__all__ = [
    'TaskResultRow',
    'CourseTaskWeight',
    'StudentScoreRow',
    'StudentScorePage',
    'RankInput',
    'RankChange',
    'StudentScoreUpdate',
    'aggregate',
    'build_weight_map',
    'round_score',
    'assign_ranks',
    'build_score_updates',
    'save_score_updates',
]
