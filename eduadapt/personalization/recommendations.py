"""
Study recommendations shown alongside a personalized session.
"""

from typing import List

from eduadapt.personalization.classifier import LearningLevel
from eduadapt.personalization.profile import PerformanceProfile

# Easy attempts a beginner should reach before moving on
BEGINNER_EASY_TARGET = 10
# Medium accuracy an intermediate subject should aim for
INTERMEDIATE_MEDIUM_TARGET = 0.6


def generate_recommendations(level: LearningLevel, profile: PerformanceProfile) -> List[str]:
    """
    Build short study suggestions for a subject.

    Args:
        level: The subject's learning level
        profile: The subject's performance profile

    Returns:
        Recommendation messages, most important first
    """
    recommendations: List[str] = []
    level = LearningLevel(level)

    if level is LearningLevel.BEGINNER:
        recommendations.append("Focus on understanding the fundamental concepts.")
        recommendations.append("Work through the easy questions in order before moving on.")
        if profile.easy.attempts < BEGINNER_EASY_TARGET:
            recommendations.append(
                f"Start by answering at least {BEGINNER_EASY_TARGET} easy questions."
            )
    elif level is LearningLevel.INTERMEDIATE:
        recommendations.append("Take on more medium-difficulty questions.")
        if profile.medium.accuracy < INTERMEDIATE_MEDIUM_TARGET:
            recommendations.append("Aim to raise your accuracy on medium-difficulty questions.")
    else:
        recommendations.append("You are handling hard questions well.")
        recommendations.append("Deepen your understanding with applied problems.")

    return recommendations
