"""
Difficulty Allocation

Maps a learning level, refined by the profile, to the target share of easy,
medium and hard questions in the next session. Allocations always sum to 1.
"""

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union

from eduadapt.common.config import AllocationConfig
from eduadapt.common.exceptions import InvalidInputError
from eduadapt.common.logger import app_logger
from eduadapt.domain.questions.model import Difficulty
from eduadapt.personalization.classifier import LearningLevel
from eduadapt.personalization.profile import PerformanceProfile

logger = app_logger.getChild("personalization.allocator")


@dataclass(frozen=True)
class DifficultyAllocation:
    """
    Target fractions of easy, medium and hard questions.

    Construction rejects any fraction that is negative, above 1 or not a
    finite number. Use ``from_weights`` to build a renormalized allocation
    from arbitrary non-negative weights.
    """
    easy: float
    medium: float
    hard: float

    def __post_init__(self):
        for name in ('easy', 'medium', 'hard'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInputError(f"allocation.{name} must be a number, got {value!r}", field=name)
            if not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise InvalidInputError(f"allocation.{name} must be between 0 and 1, got {value}", field=name)

    @classmethod
    def from_weights(cls, easy: float, medium: float, hard: float) -> 'DifficultyAllocation':
        """
        Renormalize non-negative weights so the fractions sum to exactly 1.

        Raises:
            InvalidInputError: If a weight is negative or not finite, or all are zero
        """
        weights = {'easy': easy, 'medium': medium, 'hard': hard}
        for name, value in weights.items():
            if not math.isfinite(value) or value < 0:
                raise InvalidInputError(f"weight {name} must be a non-negative number, got {value}", field=name)
        total = easy + medium + hard
        if total <= 0:
            raise InvalidInputError("allocation weights must not all be zero", field="allocation")
        easy_share = easy / total
        medium_share = medium / total
        # Last share absorbs floating-point drift
        hard_share = max(0.0, 1.0 - easy_share - medium_share)
        return cls(easy=easy_share, medium=medium_share, hard=hard_share)

    @classmethod
    def from_mapping(cls, data: Mapping[str, float]) -> 'DifficultyAllocation':
        """Build from a ``{"easy": .., "medium": .., "hard": ..}`` mapping, validating as-is."""
        missing = [tier.value for tier in Difficulty if tier.value not in data]
        if missing:
            raise InvalidInputError(f"allocation missing tiers {missing}", field="allocation")
        return cls(easy=data['easy'], medium=data['medium'], hard=data['hard'])

    def __getitem__(self, difficulty: Union[Difficulty, str]) -> float:
        return getattr(self, Difficulty.parse(difficulty).value)

    @property
    def total(self) -> float:
        return self.easy + self.medium + self.hard

    def to_dict(self) -> Dict[str, float]:
        return {'easy': self.easy, 'medium': self.medium, 'hard': self.hard}


def allocate(
    level: LearningLevel,
    profile: PerformanceProfile,
    config: Optional[AllocationConfig] = None
) -> DifficultyAllocation:
    """
    Derive the target difficulty mix for a subject.

    Starts from the level's base row. When easy accuracy is above the boost
    cut-off over enough attempts, ``boost_shift`` is moved off easy (never
    below ``easy_floor``) and split evenly between medium and hard. The
    result is renormalized to sum to 1.

    Args:
        level: The subject's learning level
        profile: The subject's performance profile
        config: Optional allocation table, defaults to the documented values

    Returns:
        The difficulty allocation
    """
    config = config or AllocationConfig()
    base = config.base_for(LearningLevel(level).value)
    easy, medium, hard = base.easy, base.medium, base.hard

    easy_stats = profile.easy
    if easy_stats.accuracy > config.boost_easy_accuracy and easy_stats.attempts >= config.boost_min_attempts:
        easy = max(config.easy_floor, easy - config.boost_shift)
        medium += config.boost_shift / 2
        hard += config.boost_shift / 2
        logger.debug(
            f"Shifted allocation toward harder tiers: easy accuracy {easy_stats.accuracy:.2f} "
            f"over {easy_stats.attempts} attempts"
        )

    return DifficultyAllocation.from_weights(easy, medium, hard)
