"""
Learning Level Classification

Maps a performance profile to a discrete learning level using ordered rules;
the first rule that matches wins.
"""

import enum
from typing import Optional

from eduadapt.common.config import LevelConfig
from eduadapt.common.logger import app_logger
from eduadapt.personalization.profile import PerformanceProfile

logger = app_logger.getChild("personalization.classifier")


class LearningLevel(enum.Enum):
    """Learning level derived from a performance profile."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


def classify(profile: PerformanceProfile, config: Optional[LevelConfig] = None) -> LearningLevel:
    """
    Classify a subject's learning level.

    Rules, in order:
    1. Easy accuracy below the beginner cut-off, or medium attempted with
       accuracy below the medium cut-off: BEGINNER. Strong easy results never
       lift a subject who is failing medium items.
    2. Medium and hard accuracy both at or above the advanced cut-offs: ADVANCED.
    3. Otherwise: INTERMEDIATE.

    A profile with no attempts is BEGINNER through rule 1.

    Args:
        profile: The subject's performance profile
        config: Optional cut-offs, defaults to the documented values

    Returns:
        The learning level
    """
    config = config or LevelConfig()
    easy, medium, hard = profile.easy, profile.medium, profile.hard

    if easy.accuracy < config.beginner_easy_accuracy or (
        medium.attempts > 0 and medium.accuracy < config.beginner_medium_accuracy
    ):
        level = LearningLevel.BEGINNER
    elif medium.accuracy >= config.advanced_medium_accuracy and hard.accuracy >= config.advanced_hard_accuracy:
        level = LearningLevel.ADVANCED
    else:
        level = LearningLevel.INTERMEDIATE

    logger.debug(
        f"Classified {level.value}: easy={easy.accuracy:.2f} medium={medium.accuracy:.2f} "
        f"({medium.attempts} attempts) hard={hard.accuracy:.2f}"
    )
    return level
