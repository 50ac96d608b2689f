"""
Shared builders for engine tests.
"""

import datetime
from typing import Dict, Optional, Tuple

from eduadapt.domain.questions.model import ClosedForm, Difficulty, OpenForm, QuestionItem
from eduadapt.domain.responses.model import ResponseRecord
from eduadapt.personalization.profile import DifficultyStats, PerformanceProfile

BASE_TIME = datetime.datetime(2024, 1, 1, 9, 0, 0, tzinfo=datetime.timezone.utc)  # a Monday


def open_question(question_id: str, difficulty="medium", answer="answer",
                  lecture_id="L1", is_published=True) -> QuestionItem:
    return QuestionItem(
        question_id=question_id,
        lecture_id=lecture_id,
        text=f"Question {question_id}",
        form=OpenForm(canonical_answer=answer),
        difficulty=difficulty,
        is_published=is_published
    )


def closed_question(question_id: str, difficulty="easy", options=("A", "B", "C"),
                    correct_index=0, lecture_id="L1", is_published=True,
                    explanation: Optional[str] = None) -> QuestionItem:
    return QuestionItem(
        question_id=question_id,
        lecture_id=lecture_id,
        text=f"Question {question_id}",
        form=ClosedForm(options=options, correct_index=correct_index),
        difficulty=difficulty,
        is_published=is_published,
        explanation=explanation
    )


def response(subject_id: str, question_id: str, is_correct: bool,
             timestamp: Optional[datetime.datetime] = None, answer="x") -> ResponseRecord:
    return ResponseRecord(
        subject_id=subject_id,
        question_id=question_id,
        answer=answer,
        is_correct=is_correct,
        timestamp=timestamp or BASE_TIME
    )


def make_profile(easy: Tuple[int, int] = (0, 0),
                 medium: Tuple[int, int] = (0, 0),
                 hard: Tuple[int, int] = (0, 0)) -> PerformanceProfile:
    """Build a profile from (attempts, correct) pairs per tier."""
    tiers: Dict[Difficulty, DifficultyStats] = {
        Difficulty.EASY: DifficultyStats(*easy),
        Difficulty.MEDIUM: DifficultyStats(*medium),
        Difficulty.HARD: DifficultyStats(*hard),
    }
    return PerformanceProfile(by_difficulty=tiers)
