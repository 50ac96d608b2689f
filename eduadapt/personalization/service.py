"""
Personalization Service

Host-facing facade over the grading and personalization components. Request
handlers call it to grade and store a submission, to build a personalized
session, and to read profiles and summaries for reporting.

Repositories and the analytics cache are supplied by the host. The service
itself keeps no state between calls beyond those collaborators.
"""

import datetime
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from eduadapt.common.cache import KeyBuilder, MemoryCache
from eduadapt.common.clock import utc_now
from eduadapt.common.config import EngineConfig
from eduadapt.common.exceptions import ConfigurationError, InvalidInputError, NotFoundError
from eduadapt.common.logger import app_logger, log_execution_time, LoggerAdapter
from eduadapt.domain.questions.model import QuestionItem
from eduadapt.domain.questions.repository import QuestionRepository
from eduadapt.domain.responses.model import PersonalizationSnapshot, ResponseRecord
from eduadapt.domain.responses.repository import ResponseStore, SnapshotStore
from eduadapt.personalization.aggregator import aggregate, index_questions
from eduadapt.personalization.allocator import DifficultyAllocation, allocate
from eduadapt.personalization import analytics
from eduadapt.personalization.analytics import LearningPatterns, LectureSummary, QuestionStatistics
from eduadapt.personalization.classifier import LearningLevel, classify
from eduadapt.personalization.grading import AnswerGrader, GradeRule
from eduadapt.personalization.profile import PerformanceProfile
from eduadapt.personalization.recommendations import generate_recommendations
from eduadapt.personalization.selection import SelectionResult, select

logger = app_logger.getChild("personalization.service")


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of grading and storing one answer."""
    response: ResponseRecord
    rule: GradeRule
    correct_answer: str
    explanation: Optional[str]
    is_update: bool

    @property
    def is_correct(self) -> bool:
        return self.response.is_correct

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.response.question_id,
            "subject_id": self.response.subject_id,
            "is_correct": self.is_correct,
            "rule": self.rule.value,
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "is_update": self.is_update,
        }


@dataclass(frozen=True)
class PersonalizedSession:
    """A personalized question list plus the derivations behind it."""
    subject_id: str
    lecture_id: str
    learning_level: LearningLevel
    allocation: DifficultyAllocation
    profile: PerformanceProfile
    selection: SelectionResult
    recommendations: Tuple[str, ...]

    @property
    def questions(self) -> Tuple[QuestionItem, ...]:
        return self.selection.questions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "lecture_id": self.lecture_id,
            "learning_level": self.learning_level.value,
            "allocation": self.allocation.to_dict(),
            "question_ids": self.selection.question_ids,
            "recommendations": list(self.recommendations),
        }


def _require_id(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} must be a non-empty string", field=field)
    return value


class PersonalizationService:
    """
    Grades submissions and builds personalized sessions.

    Profiles and lecture summaries are cached when a cache is supplied.
    Storing a submission invalidates the subject's cached profiles and the
    lecture's summary.
    """

    def __init__(
        self,
        questions: QuestionRepository,
        responses: ResponseStore,
        snapshots: Optional[SnapshotStore] = None,
        cache: Optional[MemoryCache] = None,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None
    ):
        """
        Initialize the service.

        Args:
            questions: Question repository
            responses: Response store
            snapshots: Optional store for display snapshots
            cache: Optional analytics cache owned by the caller
            config: Engine configuration, defaults to built-in values
            clock: Callable returning the current time, defaults to aware UTC
        """
        self.questions = questions
        self.responses = responses
        self.snapshots = snapshots
        self.config = config or EngineConfig()
        self.cache = cache if self.config.cache.enabled else None
        self.clock = clock or utc_now
        self.grader = AnswerGrader(self.config.grading)

    def _log(self, **context) -> LoggerAdapter:
        return LoggerAdapter(logger, context)

    @log_execution_time(logger)
    def submit_answer(self, subject_id: str, question_id: str, answer: str) -> SubmissionResult:
        """
        Grade an answer and upsert the subject's response for the question.

        Args:
            subject_id: Opaque id of the answering subject
            question_id: Id of the answered question
            answer: Submitted answer text

        Returns:
            SubmissionResult

        Raises:
            NotFoundError: If the question does not exist
        """
        _require_id(subject_id, "subject_id")
        _require_id(question_id, "question_id")
        log = self._log(subject_id=subject_id, question_id=question_id)

        question = self.questions.get_by_id(question_id)
        if question is None:
            log.warning("Answer submitted for unknown question")
            raise NotFoundError("Question", question_id)

        result = self.grader.evaluate_question(question, answer or "")
        record = ResponseRecord(
            subject_id=subject_id,
            question_id=question_id,
            answer=answer or "",
            is_correct=result.is_correct,
            timestamp=self.clock()
        )
        stored, is_update = self.responses.upsert(record)

        if self.cache is not None:
            self.cache.invalidate_prefix(KeyBuilder.subject_prefix(subject_id))
            self.cache.delete(KeyBuilder.lecture_summary_key(question.lecture_id))

        log.info(f"Stored {'updated' if is_update else 'new'} response: correct={result.is_correct}")
        return SubmissionResult(
            response=stored,
            rule=result.rule,
            correct_answer=question.canonical_answer,
            explanation=question.explanation,
            is_update=is_update
        )

    def _compute_profile(self, subject_id: str, lecture_id: str) -> PerformanceProfile:
        # One bulk read each; the aggregator resolves questions from the index
        index = index_questions(self.questions.list_for_lecture(lecture_id, include_unpublished=True))
        return aggregate(self.responses.list_for_subject(subject_id), index)

    def get_profile(self, subject_id: str, lecture_id: str) -> PerformanceProfile:
        """
        Get a subject's performance profile for a lecture.

        The returned profile may come from the cache and must be treated as
        read-only.
        """
        _require_id(subject_id, "subject_id")
        _require_id(lecture_id, "lecture_id")

        if self.cache is None:
            return self._compute_profile(subject_id, lecture_id)
        return self.cache.get_or_compute(
            KeyBuilder.profile_key(subject_id, lecture_id),
            lambda: self._compute_profile(subject_id, lecture_id)
        )

    def get_learning_level(self, subject_id: str, lecture_id: str) -> LearningLevel:
        return classify(self.get_profile(subject_id, lecture_id), self.config.levels)

    def get_allocation(self, subject_id: str, lecture_id: str) -> DifficultyAllocation:
        profile = self.get_profile(subject_id, lecture_id)
        return allocate(classify(profile, self.config.levels), profile, self.config.allocation)

    @log_execution_time(logger)
    def build_session(
        self,
        subject_id: str,
        lecture_id: str,
        requested_count: Optional[int] = None
    ) -> PersonalizedSession:
        """
        Build a personalized question list for a subject.

        Args:
            subject_id: Opaque id of the subject
            lecture_id: Lecture whose published questions are candidates
            requested_count: Maximum questions, defaults to the configured session size

        Returns:
            PersonalizedSession
        """
        if requested_count is None:
            requested_count = self.config.session.default_question_count

        profile = self.get_profile(subject_id, lecture_id)
        level = classify(profile, self.config.levels)
        allocation = allocate(level, profile, self.config.allocation)
        candidates = self.questions.list_for_lecture(lecture_id)

        selection = select(
            candidates,
            profile.questions,
            allocation,
            requested_count,
            now=self.clock(),
            config=self.config.scoring
        )

        self._log(subject_id=subject_id, lecture_id=lecture_id).info(
            f"Built session: level={level.value} selected={len(selection)}/{requested_count} "
            f"from {len(candidates)} candidates"
        )
        return PersonalizedSession(
            subject_id=subject_id,
            lecture_id=lecture_id,
            learning_level=level,
            allocation=allocation,
            profile=profile,
            selection=selection,
            recommendations=tuple(generate_recommendations(level, profile))
        )

    def save_snapshot(self, session: PersonalizedSession) -> PersonalizationSnapshot:
        """
        Persist the session's level and allocation as a display snapshot.

        Raises:
            ConfigurationError: If the service has no snapshot store
        """
        if self.snapshots is None:
            raise ConfigurationError("no snapshot store configured", config_key="snapshots")

        now = self.clock()
        snapshot, _ = self.snapshots.upsert(PersonalizationSnapshot(
            subject_id=session.subject_id,
            lecture_id=session.lecture_id,
            learning_level=session.learning_level.value,
            allocation=session.allocation.to_dict(),
            created_at=now,
            updated_at=now
        ))
        return snapshot

    def get_learning_patterns(self, subject_id: str, lecture_id: Optional[str] = None) -> LearningPatterns:
        """
        Summarize a subject's learning patterns, optionally within one lecture.
        """
        _require_id(subject_id, "subject_id")
        responses: List[ResponseRecord] = self.responses.list_for_subject(subject_id)
        if lecture_id is None:
            index = index_questions(self.questions.get_many({r.question_id for r in responses}))
        else:
            index = index_questions(self.questions.list_for_lecture(lecture_id, include_unpublished=True))
            responses = [r for r in responses if r.question_id in index]
        return analytics.learning_patterns(responses, index)

    def lecture_summary(self, lecture_id: str) -> LectureSummary:
        """Lecture-wide statistics, cached when a cache is configured."""
        _require_id(lecture_id, "lecture_id")

        def compute() -> LectureSummary:
            questions = self.questions.list_for_lecture(lecture_id, include_unpublished=True)
            responses = self.responses.list_for_questions(q.question_id for q in questions)
            return analytics.lecture_summary(questions, responses, now=self.clock())

        if self.cache is None:
            return compute()
        return self.cache.get_or_compute(KeyBuilder.lecture_summary_key(lecture_id), compute)

    def question_statistics(self, question_id: str) -> QuestionStatistics:
        """
        Anonymous answer statistics for one question.

        Raises:
            NotFoundError: If the question does not exist
        """
        _require_id(question_id, "question_id")
        question = self.questions.get_by_id(question_id)
        if question is None:
            raise NotFoundError("Question", question_id)
        return analytics.question_statistics(question, self.responses.list_for_question(question_id))
