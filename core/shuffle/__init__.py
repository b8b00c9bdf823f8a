"""Mentor shuffle: next-cycle mentor ordering and task checker distribution."""

from core.shuffle.policies import (
    MentorRef,
    ShufflePolicy,
    RandomShufflePolicy,
    RotateShufflePolicy,
    build_policy,
)
from core.shuffle.service import MentorShuffleService, StageCloseResult, plan_task_checkers

__all__ = [
    'MentorRef',
    'ShufflePolicy',
    'RandomShufflePolicy',
    'RotateShufflePolicy',
    'build_policy',
    'MentorShuffleService',
    'StageCloseResult',
    'plan_task_checkers',
]
