"""
Answer Grading

This module decides whether a submitted answer matches a question's
canonical answer. Checks run in a fixed order and the first one that passes
decides the result:

1. Exact match after normalization (all question types)
2. Keyword overlap between canonical and submitted tokens (open form only)
3. Normalized edit-distance similarity (open form only)

Closed-form questions stop after the exact check. A near-miss on a discrete
option set is a different option, not a typo.
"""

import enum
from dataclasses import dataclass
from typing import List, Optional, Union

from rapidfuzz.distance import Levenshtein

from eduadapt.common.config import GradingConfig
from eduadapt.common.exceptions import InvalidInputError
from eduadapt.common.logger import app_logger
from eduadapt.common.text import fold_text, normalize_answer
from eduadapt.domain.questions.model import QuestionItem, QuestionType

logger = app_logger.getChild("personalization.grading")


class GradeRule(enum.Enum):
    """The check that decided a grade."""
    EXACT = "exact"
    KEYWORD = "keyword"
    EDIT = "edit"
    NONE = "none"


@dataclass(frozen=True)
class GradeResult:
    """
    Outcome of grading one answer.

    Attributes:
        is_correct: Whether the answer was accepted
        rule: The check that accepted it, or NONE when rejected
        keyword_overlap: Fraction of canonical tokens found, if computed
        edit_similarity: Normalized edit similarity, if computed
    """
    is_correct: bool
    rule: GradeRule
    keyword_overlap: Optional[float] = None
    edit_similarity: Optional[float] = None


def tokenize(text: Optional[str], min_length: int = 2) -> List[str]:
    """
    Split folded text into distinct words of at least ``min_length`` characters.

    Order of first appearance is kept.
    """
    tokens = [token for token in fold_text(text).split() if len(token) >= min_length]
    return list(dict.fromkeys(tokens))


def keyword_overlap(canonical_tokens: List[str], submitted_tokens: List[str]) -> float:
    """
    Fraction of canonical tokens matched by some submitted token.

    A pair matches when either token contains the other.
    Returns 0.0 when there are no canonical tokens.

    Containment lets a short submitted token match inside a long canonical
    one: with the default two-character minimum, ``"is"`` matches
    ``"photosynthesis"``. Single-keyword answers are therefore easy to
    over-accept; ``GradingConfig.min_token_length`` is the knob for it.
    """
    if not canonical_tokens:
        return 0.0
    matched = sum(
        1 for expected in canonical_tokens
        if any(expected in given or given in expected for given in submitted_tokens)
    )
    return matched / len(canonical_tokens)


def edit_similarity(a: str, b: str) -> float:
    """Return ``1 - levenshtein(a, b) / max(len(a), len(b))``; 1.0 for two empty strings."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


class AnswerGrader:
    """
    Grades submitted answers with configurable thresholds.

    Instances hold no state besides their configuration and are safe to
    share between threads.
    """

    def __init__(self, config: Optional[GradingConfig] = None):
        self.config = config or GradingConfig()

    def evaluate(
        self,
        canonical_answer: str,
        submitted_answer: str,
        question_type: Union[QuestionType, str]
    ) -> GradeResult:
        """
        Grade one answer and report which check decided.

        Args:
            canonical_answer: The correct answer text
            submitted_answer: The subject's answer text
            question_type: CLOSED_FORM or OPEN_FORM (or their values)

        Returns:
            GradeResult describing the decision
        """
        try:
            question_type = QuestionType(question_type)
        except ValueError:
            raise InvalidInputError(f"unknown question type {question_type!r}", field="question_type")
        expected = normalize_answer(canonical_answer)
        given = normalize_answer(submitted_answer)

        if expected == given:
            return GradeResult(True, GradeRule.EXACT)

        if question_type is QuestionType.CLOSED_FORM:
            return GradeResult(False, GradeRule.NONE)

        canonical_tokens = tokenize(canonical_answer, self.config.min_token_length)
        if not canonical_tokens:
            # Nothing to match on; only an exact match could have passed
            return GradeResult(False, GradeRule.NONE)

        submitted_tokens = tokenize(submitted_answer, self.config.min_token_length)
        overlap = keyword_overlap(canonical_tokens, submitted_tokens)
        if overlap >= self.config.keyword_overlap_threshold:
            return GradeResult(True, GradeRule.KEYWORD, keyword_overlap=overlap)

        similarity = edit_similarity(expected, given)
        if similarity >= self.config.edit_similarity_threshold:
            return GradeResult(True, GradeRule.EDIT, keyword_overlap=overlap, edit_similarity=similarity)

        return GradeResult(False, GradeRule.NONE, keyword_overlap=overlap, edit_similarity=similarity)

    def grade(
        self,
        canonical_answer: str,
        submitted_answer: str,
        question_type: Union[QuestionType, str]
    ) -> bool:
        """Return whether the submitted answer is correct."""
        return self.evaluate(canonical_answer, submitted_answer, question_type).is_correct

    def evaluate_question(self, question: QuestionItem, submitted_answer: str) -> GradeResult:
        """Grade an answer against a question's own form and canonical answer."""
        result = self.evaluate(question.canonical_answer, submitted_answer, question.question_type)
        logger.debug(
            f"Graded question {question.question_id}: correct={result.is_correct} rule={result.rule.value}"
        )
        return result


def grade(
    canonical_answer: str,
    submitted_answer: str,
    question_type: Union[QuestionType, str],
    config: Optional[GradingConfig] = None
) -> bool:
    """
    Decide correctness of one answer.

    Args:
        canonical_answer: The correct answer text
        submitted_answer: The subject's answer text
        question_type: CLOSED_FORM or OPEN_FORM (or their values)
        config: Optional thresholds, defaults to the documented values

    Returns:
        True if the answer is accepted
    """
    return AnswerGrader(config).grade(canonical_answer, submitted_answer, question_type)


def grade_question(question: QuestionItem, submitted_answer: str, config: Optional[GradingConfig] = None) -> bool:
    """Decide correctness of an answer to ``question``."""
    return AnswerGrader(config).evaluate_question(question, submitted_answer).is_correct
