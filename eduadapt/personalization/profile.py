"""
Performance Profile

This module defines the derived statistics the engine computes from a
subject's responses: attempts and accuracy per difficulty tier and per
question. Profiles are never the source of truth and can be rebuilt from
responses at any time.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from eduadapt.common.clock import parse_timestamp
from eduadapt.domain.questions.model import Difficulty


def _ratio(correct: int, attempts: int) -> float:
    return correct / attempts if attempts > 0 else 0.0


@dataclass
class DifficultyStats:
    """Attempt counts for one difficulty tier."""

    attempts: int = 0
    correct: int = 0

    @property
    def accuracy(self) -> float:
        """Fraction correct, 0.0 when there are no attempts."""
        return _ratio(self.correct, self.attempts)

    def record(self, is_correct: bool) -> None:
        self.attempts += 1
        if is_correct:
            self.correct += 1

    def to_dict(self) -> Dict[str, Any]:
        return {"attempts": self.attempts, "correct": self.correct, "accuracy": self.accuracy}


@dataclass
class QuestionStats:
    """Attempt counts and recency for one question."""

    attempts: int = 0
    correct: int = 0
    last_attempt: Optional[datetime.datetime] = None

    @property
    def accuracy(self) -> float:
        """Fraction correct, 0.0 when there are no attempts."""
        return _ratio(self.correct, self.attempts)

    def record(self, is_correct: bool, timestamp: Optional[datetime.datetime]) -> None:
        self.attempts += 1
        if is_correct:
            self.correct += 1
        if timestamp is not None and (self.last_attempt is None or timestamp > self.last_attempt):
            self.last_attempt = timestamp

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempts": self.attempts,
            "correct": self.correct,
            "accuracy": self.accuracy,
            "last_attempt": self.last_attempt.isoformat() if self.last_attempt else None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuestionStats':
        return cls(
            attempts=data.get("attempts", 0),
            correct=data.get("correct", 0),
            last_attempt=parse_timestamp(data.get("last_attempt"))
        )


@dataclass
class PerformanceProfile:
    """
    A subject's aggregated performance.

    Attributes:
        by_difficulty: Stats for every tier; all three tiers are always present
        questions: Stats per question id, only for questions with responses
    """

    by_difficulty: Dict[Difficulty, DifficultyStats] = field(
        default_factory=lambda: {tier: DifficultyStats() for tier in Difficulty}
    )
    questions: Dict[str, QuestionStats] = field(default_factory=dict)

    def tier(self, difficulty: Difficulty) -> DifficultyStats:
        return self.by_difficulty[difficulty]

    @property
    def easy(self) -> DifficultyStats:
        return self.by_difficulty[Difficulty.EASY]

    @property
    def medium(self) -> DifficultyStats:
        return self.by_difficulty[Difficulty.MEDIUM]

    @property
    def hard(self) -> DifficultyStats:
        return self.by_difficulty[Difficulty.HARD]

    @property
    def total_attempts(self) -> int:
        return sum(stats.attempts for stats in self.by_difficulty.values())

    @property
    def total_correct(self) -> int:
        return sum(stats.correct for stats in self.by_difficulty.values())

    @property
    def overall_accuracy(self) -> float:
        return _ratio(self.total_correct, self.total_attempts)

    @property
    def is_cold_start(self) -> bool:
        """True when the subject has no attempts at all."""
        return self.total_attempts == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting surfaces."""
        return {
            "difficulty": {tier.value: stats.to_dict() for tier, stats in self.by_difficulty.items()},
            "questions": {qid: stats.to_dict() for qid, stats in self.questions.items()},
            "total_attempts": self.total_attempts,
            "overall_accuracy": self.overall_accuracy
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PerformanceProfile':
        """Create from dictionary; derived accuracy values are ignored."""
        tiers = data.get("difficulty", {})
        return cls(
            by_difficulty={
                tier: DifficultyStats(
                    attempts=tiers.get(tier.value, {}).get("attempts", 0),
                    correct=tiers.get(tier.value, {}).get("correct", 0)
                )
                for tier in Difficulty
            },
            questions={
                qid: QuestionStats.from_dict(stats)
                for qid, stats in data.get("questions", {}).items()
            }
        )
