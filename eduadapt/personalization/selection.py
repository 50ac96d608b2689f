"""
Personalized Question Selection

This module ranks candidate questions for a subject and fills a bounded,
difficulty-balanced session:

1. Every candidate gets a score. Unseen questions score highest; seen ones
   score by weakness, time since the last attempt and how little they have
   been practiced. The score is then weighted by the allocation share of
   the candidate's tier.
2. Per-tier targets are ``round(requested_count * share)``.
3. Candidates are walked in score order (ties keep input order), taking a
   candidate while its tier is below target.
4. Any remaining slots are filled in score order regardless of tier.
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from eduadapt.common.clock import as_utc, utc_now
from eduadapt.common.config import ScoringConfig
from eduadapt.common.exceptions import InvalidInputError
from eduadapt.common.logger import app_logger
from eduadapt.domain.questions.model import Difficulty, QuestionItem
from eduadapt.personalization.allocator import DifficultyAllocation
from eduadapt.personalization.profile import QuestionStats

logger = app_logger.getChild("personalization.selection")

SECONDS_PER_DAY = 24 * 60 * 60

AllocationLike = Union[DifficultyAllocation, Mapping[str, float]]


@dataclass(frozen=True)
class SelectionResult:
    """
    Ordered questions chosen for a session.

    Attributes:
        questions: Selected questions in selection order, no duplicate ids
        targets: Per-tier targets used by the quota pass
        scores: Score of every ranked candidate, by question id
    """
    questions: Tuple[QuestionItem, ...] = ()
    targets: Dict[Difficulty, int] = field(default_factory=dict)
    scores: Dict[str, float] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.questions)

    def __iter__(self) -> Iterator[QuestionItem]:
        return iter(self.questions)

    @property
    def question_ids(self) -> List[str]:
        return [question.question_id for question in self.questions]

    def counts_by_difficulty(self) -> Dict[Difficulty, int]:
        counts = {tier: 0 for tier in Difficulty}
        for question in self.questions:
            counts[question.difficulty] += 1
        return counts


def _coerce_allocation(allocation: AllocationLike) -> DifficultyAllocation:
    if isinstance(allocation, DifficultyAllocation):
        return allocation
    if isinstance(allocation, Mapping):
        return DifficultyAllocation.from_mapping(allocation)
    raise InvalidInputError(f"unsupported allocation type {type(allocation).__name__}", field="allocation")


def _validate_count(requested_count: int) -> int:
    if isinstance(requested_count, bool) or not isinstance(requested_count, int):
        raise InvalidInputError(f"requested_count must be an integer, got {requested_count!r}", field="requested_count")
    if requested_count < 0:
        raise InvalidInputError(f"requested_count must not be negative, got {requested_count}", field="requested_count")
    return requested_count


def score_candidate(
    question: QuestionItem,
    stats: Optional[QuestionStats],
    allocation: DifficultyAllocation,
    now: datetime.datetime,
    config: Optional[ScoringConfig] = None
) -> float:
    """
    Score one candidate question.

    Args:
        question: The candidate
        stats: The subject's stats for this question, None if never attempted
        allocation: Target difficulty mix
        now: Reference time for the recency bonus
        config: Optional weights, defaults to the documented values

    Returns:
        The weighted score; higher is selected first
    """
    config = config or ScoringConfig()

    if stats is None:
        score = config.unseen_score
    else:
        score = (1.0 - stats.accuracy) * config.weakness_weight
        if stats.last_attempt is not None:
            # Clock skew can put an attempt in the future; count it as today
            elapsed = as_utc(now) - as_utc(stats.last_attempt)
            days = max(0.0, elapsed.total_seconds() / SECONDS_PER_DAY)
            score += min(days * config.recency_points_per_day, config.recency_cap)
        score += max(0.0, config.practice_bonus - stats.attempts * config.practice_decay)

    return score * allocation[question.difficulty]


def difficulty_targets(requested_count: int, allocation: AllocationLike) -> Dict[Difficulty, int]:
    """
    Per-tier question targets, rounding halves up.

    Targets need not add up to ``requested_count``.
    """
    requested_count = _validate_count(requested_count)
    allocation = _coerce_allocation(allocation)
    return {
        tier: int(math.floor(requested_count * allocation[tier] + 0.5))
        for tier in Difficulty
    }


def select(
    candidates: Iterable[QuestionItem],
    per_question_stats: Mapping[str, QuestionStats],
    allocation: AllocationLike,
    requested_count: int,
    now: Optional[datetime.datetime] = None,
    config: Optional[ScoringConfig] = None
) -> SelectionResult:
    """
    Select up to ``requested_count`` questions for a session.

    The result is deterministic for identical inputs, never longer than
    ``requested_count`` and never contains the same question id twice.
    An empty candidate pool yields an empty result.

    Args:
        candidates: Candidate questions in a stable order
        per_question_stats: The subject's stats by question id
        allocation: Target difficulty mix
        requested_count: Maximum number of questions to return
        now: Reference time for the recency bonus, defaults to the current UTC time;
            naive values are taken as UTC
        config: Optional scoring weights

    Returns:
        The SelectionResult

    Raises:
        InvalidInputError: For a negative or non-integer count or a malformed allocation
    """
    requested_count = _validate_count(requested_count)
    allocation = _coerce_allocation(allocation)
    now = as_utc(now) if now is not None else utc_now()
    targets = difficulty_targets(requested_count, allocation)

    unique: List[QuestionItem] = []
    seen_ids = set()
    for question in candidates:
        if question.question_id in seen_ids:
            continue
        seen_ids.add(question.question_id)
        unique.append(question)

    scores = {
        question.question_id: score_candidate(
            question, per_question_stats.get(question.question_id), allocation, now, config
        )
        for question in unique
    }

    if requested_count == 0 or not unique:
        return SelectionResult(questions=(), targets=targets, scores=scores)

    # sorted() is stable, so equal scores keep input order
    ranked = sorted(unique, key=lambda question: -scores[question.question_id])

    selected: List[QuestionItem] = []
    selected_ids = set()
    counts = {tier: 0 for tier in Difficulty}

    for question in ranked:
        if len(selected) >= requested_count:
            break
        if counts[question.difficulty] < targets[question.difficulty]:
            selected.append(question)
            selected_ids.add(question.question_id)
            counts[question.difficulty] += 1

    quota_filled = len(selected)
    for question in ranked:
        if len(selected) >= requested_count:
            break
        if question.question_id not in selected_ids:
            selected.append(question)
            selected_ids.add(question.question_id)

    logger.debug(
        f"Selected {len(selected)}/{requested_count} from {len(unique)} candidates "
        f"({quota_filled} by quota, {len(selected) - quota_filled} by score)"
    )
    return SelectionResult(questions=tuple(selected), targets=targets, scores=scores)
