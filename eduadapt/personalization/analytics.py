"""
Learning Analytics

Read-only summaries of response histories for reporting surfaces: a
subject's learning patterns over time, per-question answer statistics and a
lecture-wide summary broken down by difficulty and question. Every
percentage is guarded against empty denominators.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from eduadapt.common.clock import as_utc, utc_now
from eduadapt.domain.questions.model import Difficulty, QuestionItem
from eduadapt.domain.responses.model import ResponseRecord
from eduadapt.personalization.aggregator import index_questions

# Minimum history before learning velocity is reported
VELOCITY_MIN_RESPONSES = 10
RECENT_ACTIVITY_SIZE = 10

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole > 0 else 0


@dataclass
class BucketStats:
    """Attempt counts for one time or difficulty bucket."""
    attempts: int = 0
    correct: int = 0

    @property
    def accuracy_percent(self) -> int:
        return _percent(self.correct, self.attempts)

    def record(self, is_correct: bool) -> None:
        self.attempts += 1
        if is_correct:
            self.correct += 1

    def to_dict(self) -> Dict[str, Any]:
        return {"attempts": self.attempts, "correct": self.correct, "accuracy": self.accuracy_percent}


@dataclass
class LearningPatterns:
    """
    A subject's learning patterns.

    Attributes:
        total_responses: Number of responses considered
        overall_accuracy: Percent correct, rounded
        hourly: 24 buckets by hour of day
        weekday: 7 buckets, Monday first
        by_difficulty: Buckets for responses to indexed questions
        max_streak: Longest run of correct answers in timestamp order
        learning_velocity: Percent change from first-quarter to last-quarter accuracy
        recent_activity: The latest responses, oldest first
    """
    total_responses: int = 0
    overall_accuracy: int = 0
    hourly: List[BucketStats] = field(default_factory=lambda: [BucketStats() for _ in range(24)])
    weekday: List[BucketStats] = field(default_factory=lambda: [BucketStats() for _ in range(7)])
    by_difficulty: Dict[Difficulty, BucketStats] = field(
        default_factory=lambda: {tier: BucketStats() for tier in Difficulty}
    )
    max_streak: int = 0
    learning_velocity: int = 0
    recent_activity: List[ResponseRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_responses": self.total_responses,
            "overall_accuracy": self.overall_accuracy,
            "hourly": [dict(hour=hour, **bucket.to_dict()) for hour, bucket in enumerate(self.hourly)],
            "weekday": [
                dict(day=WEEKDAY_NAMES[day], **bucket.to_dict()) for day, bucket in enumerate(self.weekday)
            ],
            "difficulty": {tier.value: bucket.to_dict() for tier, bucket in self.by_difficulty.items()},
            "max_streak": self.max_streak,
            "learning_velocity": self.learning_velocity,
            "recent_activity": [
                {"timestamp": r.timestamp.isoformat(), "is_correct": r.is_correct}
                for r in self.recent_activity
            ],
        }


def _accuracy(responses: List[ResponseRecord]) -> float:
    if not responses:
        return 0.0
    return sum(1 for r in responses if r.is_correct) / len(responses)


def learning_velocity(ordered: List[ResponseRecord]) -> int:
    """
    Percent change between first-quarter and last-quarter accuracy.

    Returns 0 for histories of ``VELOCITY_MIN_RESPONSES`` or fewer, and when
    the first quarter has no correct answers.
    """
    if len(ordered) <= VELOCITY_MIN_RESPONSES:
        return 0
    quarter = len(ordered) // 4
    first = _accuracy(ordered[:quarter])
    last = _accuracy(ordered[-quarter:])
    if first == 0:
        return 0
    return round((last - first) / first * 100)


def learning_patterns(
    responses: Iterable[ResponseRecord],
    questions_by_id: Mapping[str, QuestionItem]
) -> LearningPatterns:
    """
    Summarize when and how well a subject answers.

    Args:
        responses: The subject's responses
        questions_by_id: Pre-loaded questions for the difficulty breakdown

    Returns:
        LearningPatterns
    """
    ordered = sorted(responses, key=lambda r: r.timestamp)
    patterns = LearningPatterns(total_responses=len(ordered))

    streak = 0
    for response in ordered:
        patterns.hourly[response.timestamp.hour].record(response.is_correct)
        patterns.weekday[response.timestamp.weekday()].record(response.is_correct)

        question = questions_by_id.get(response.question_id)
        if question is not None:
            patterns.by_difficulty[question.difficulty].record(response.is_correct)

        if response.is_correct:
            streak += 1
            patterns.max_streak = max(patterns.max_streak, streak)
        else:
            streak = 0

    patterns.overall_accuracy = _percent(sum(1 for r in ordered if r.is_correct), len(ordered))
    patterns.learning_velocity = learning_velocity(ordered)
    patterns.recent_activity = ordered[-RECENT_ACTIVITY_SIZE:]
    return patterns


@dataclass(frozen=True)
class QuestionStatistics:
    """
    Anonymous response statistics for one question.

    Attributes:
        question_id: The question
        difficulty: Its difficulty tier
        total_responses: Number of stored responses
        correct_responses: How many of them are correct
        answer_distribution: Count of each submitted answer text
    """
    question_id: str
    difficulty: Difficulty
    total_responses: int = 0
    correct_responses: int = 0
    answer_distribution: Dict[str, int] = field(default_factory=dict)

    @property
    def incorrect_responses(self) -> int:
        return self.total_responses - self.correct_responses

    @property
    def accuracy(self) -> float:
        """Fraction correct, 0.0 without responses."""
        return self.correct_responses / self.total_responses if self.total_responses else 0.0

    @property
    def correct_rate(self) -> int:
        return _percent(self.correct_responses, self.total_responses)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "difficulty": self.difficulty.value,
            "total_responses": self.total_responses,
            "correct_responses": self.correct_responses,
            "incorrect_responses": self.incorrect_responses,
            "correct_rate": self.correct_rate,
            "answer_distribution": dict(self.answer_distribution),
        }


def question_statistics(question: QuestionItem, responses: Iterable[ResponseRecord]) -> QuestionStatistics:
    """
    Count responses and submitted answers for one question.

    Responses to other questions are ignored. No subject ids are kept.
    """
    total = correct = 0
    distribution: Dict[str, int] = {}
    for response in responses:
        if response.question_id != question.question_id:
            continue
        total += 1
        if response.is_correct:
            correct += 1
        distribution[response.answer] = distribution.get(response.answer, 0) + 1
    return QuestionStatistics(
        question_id=question.question_id,
        difficulty=question.difficulty,
        total_responses=total,
        correct_responses=correct,
        answer_distribution=distribution
    )


@dataclass(frozen=True)
class DifficultySummary:
    """Question count and mean per-question accuracy (percent) for one tier."""
    question_count: int = 0
    average_accuracy: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"question_count": self.question_count, "average_accuracy": self.average_accuracy}


@dataclass(frozen=True)
class LectureSummary:
    """
    Lecture-wide response statistics.

    ``by_difficulty`` averages per-question accuracy, so questions without
    responses count as 0%. ``questions`` follows the lecture's question order.
    """
    total_questions: int
    total_responses: int
    overall_accuracy: float
    student_count: int
    completion_rate: float
    calculated_at: datetime.datetime
    by_difficulty: Dict[Difficulty, DifficultySummary] = field(
        default_factory=lambda: {tier: DifficultySummary() for tier in Difficulty}
    )
    questions: Tuple[QuestionStatistics, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_questions": self.total_questions,
            "total_responses": self.total_responses,
            "overall_accuracy": self.overall_accuracy,
            "student_count": self.student_count,
            "completion_rate": self.completion_rate,
            "calculated_at": self.calculated_at.isoformat(),
            "difficulty": {tier.value: summary.to_dict() for tier, summary in self.by_difficulty.items()},
            "questions": [stats.to_dict() for stats in self.questions],
        }


def _difficulty_summaries(stats: List[QuestionStatistics]) -> Dict[Difficulty, DifficultySummary]:
    summaries = {}
    for tier in Difficulty:
        in_tier = [s for s in stats if s.difficulty is tier]
        if in_tier:
            average = sum(s.accuracy for s in in_tier) / len(in_tier) * 100
            summaries[tier] = DifficultySummary(question_count=len(in_tier), average_accuracy=average)
        else:
            summaries[tier] = DifficultySummary()
    return summaries


def lecture_summary(
    questions: Iterable[QuestionItem],
    responses: Iterable[ResponseRecord],
    now: Optional[datetime.datetime] = None
) -> LectureSummary:
    """
    Summarize responses to a lecture's questions.

    Responses to questions outside ``questions`` are ignored. Completion
    rate is responses over (questions x responding subjects), as a percent.

    Args:
        questions: The lecture's questions
        responses: Responses, possibly including other lectures'
        now: Timestamp recorded on the summary

    Returns:
        LectureSummary
    """
    lecture_questions = list(index_questions(questions).values())
    by_question: Dict[str, List[ResponseRecord]] = {q.question_id: [] for q in lecture_questions}
    for response in responses:
        if response.question_id in by_question:
            by_question[response.question_id].append(response)

    relevant = [r for group in by_question.values() for r in group]
    subjects = {r.subject_id for r in relevant}
    correct = sum(1 for r in relevant if r.is_correct)

    overall = correct / len(relevant) * 100 if relevant else 0.0
    possible = len(by_question) * len(subjects)
    completion = len(relevant) / possible * 100 if possible else 0.0

    per_question = [question_statistics(q, by_question[q.question_id]) for q in lecture_questions]

    return LectureSummary(
        total_questions=len(by_question),
        total_responses=len(relevant),
        overall_accuracy=overall,
        student_count=len(subjects),
        completion_rate=completion,
        calculated_at=as_utc(now) if now is not None else utc_now(),
        by_difficulty=_difficulty_summaries(per_question),
        questions=tuple(per_question)
    )
