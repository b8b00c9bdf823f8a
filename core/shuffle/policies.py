"""
Shuffle Policies - how the next-cycle mentor ordering is produced.

The service hands a policy the active mentors of a course in creation order
and receives the mentor ids in the order used to distribute students and
review duties for the next stage.
"""
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from core.config_loader import ShuffleConfig


@dataclass(frozen=True)
class MentorRef:
    """Active mentor of a course as seen by a shuffle policy."""
    id: int
    name: str = ""
    max_students_limit: int = 0


class ShufflePolicy(ABC):
    """
    Abstract mentor ordering strategy.
    """

    @abstractmethod
    def shuffle(self, mentors: Sequence[MentorRef]) -> List[int]:
        """
        Return the ids of all given mentors, each exactly once, in next-cycle order.
        """
        pass


class RandomShufflePolicy(ShufflePolicy):
    """Uniform random permutation. Default policy."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def shuffle(self, mentors: Sequence[MentorRef]) -> List[int]:
        ids = [mentor.id for mentor in mentors]
        self._rng.shuffle(ids)
        return ids


class RotateShufflePolicy(ShufflePolicy):
    """Deterministic: the first mentor moves to the end."""

    def shuffle(self, mentors: Sequence[MentorRef]) -> List[int]:
        ids = [mentor.id for mentor in mentors]
        return ids[1:] + ids[:1]


def build_policy(config: ShuffleConfig) -> ShufflePolicy:
    if config.policy == "rotate":
        return RotateShufflePolicy()
    return RandomShufflePolicy(seed=config.seed)
