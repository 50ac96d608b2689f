"""
Performance Aggregation

Builds a PerformanceProfile from a subject's responses in a single pass.
Questions are resolved through a pre-built id index; callers fetch the
responses and questions once and never look questions up per response.
"""

from typing import Dict, Iterable, Mapping

from eduadapt.common.exceptions import NotFoundError
from eduadapt.common.logger import app_logger
from eduadapt.domain.questions.model import QuestionItem
from eduadapt.domain.responses.model import ResponseRecord
from eduadapt.personalization.profile import PerformanceProfile, QuestionStats

logger = app_logger.getChild("personalization.aggregator")


def index_questions(questions: Iterable[QuestionItem]) -> Dict[str, QuestionItem]:
    """Index questions by id, keeping the first of any duplicate ids."""
    index: Dict[str, QuestionItem] = {}
    for question in questions:
        index.setdefault(question.question_id, question)
    return index


def aggregate(
    responses: Iterable[ResponseRecord],
    questions_by_id: Mapping[str, QuestionItem],
    strict: bool = False
) -> PerformanceProfile:
    """
    Aggregate responses into per-difficulty and per-question statistics.

    The question index defines the scope of the profile, typically one
    lecture. Responses to questions outside the index are skipped, unless
    ``strict`` is set, in which case they raise.

    Args:
        responses: The subject's responses
        questions_by_id: Pre-loaded questions keyed by id
        strict: Raise instead of skipping responses to unknown questions

    Returns:
        A new PerformanceProfile; all-zero when there are no responses

    Raises:
        NotFoundError: In strict mode, for a response to an unknown question
    """
    profile = PerformanceProfile()
    skipped = 0

    for response in responses:
        question = questions_by_id.get(response.question_id)
        if question is None:
            if strict:
                raise NotFoundError("Question", response.question_id)
            skipped += 1
            continue

        profile.by_difficulty[question.difficulty].record(response.is_correct)

        stats = profile.questions.get(response.question_id)
        if stats is None:
            stats = profile.questions[response.question_id] = QuestionStats()
        stats.record(response.is_correct, response.timestamp)

    if skipped:
        logger.debug(f"Skipped {skipped} responses to questions outside the supplied index")

    return profile
