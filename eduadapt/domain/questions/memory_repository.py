"""
Memory Question Repository Module

This module provides an in-memory implementation of the QuestionRepository
interface, used by tests and by hosts that load a question bank up front.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional

from .model import QuestionItem
from .repository import QuestionRepository

logger = logging.getLogger(__name__)


class MemoryQuestionRepository(QuestionRepository):
    """
    In-memory implementation of the QuestionRepository.

    Questions are kept in insertion order; replacing a question keeps its
    original position.
    """

    def __init__(self, initial_data: Optional[Iterable[QuestionItem]] = None):
        """
        Initialize the repository with optional initial data.

        Args:
            initial_data: Optional questions to initialize with
        """
        self._questions: Dict[str, QuestionItem] = {}
        self._lock = threading.Lock()

        for question in initial_data or []:
            self._questions[question.question_id] = question

    def get_by_id(self, question_id: str) -> Optional[QuestionItem]:
        return self._questions.get(question_id)

    def get_many(self, question_ids: Iterable[str]) -> List[QuestionItem]:
        wanted = set(question_ids)
        with self._lock:
            return [question for qid, question in self._questions.items() if qid in wanted]

    def list_for_lecture(self, lecture_id: str, include_unpublished: bool = False) -> List[QuestionItem]:
        with self._lock:
            questions = list(self._questions.values())
        return [
            question for question in questions
            if question.lecture_id == lecture_id
            and (include_unpublished or question.is_published)
        ]

    def save(self, question: QuestionItem) -> QuestionItem:
        with self._lock:
            self._questions[question.question_id] = question
        logger.debug(f"Saved question {question.question_id} for lecture {question.lecture_id}")
        return question

    def get_all(self) -> List[QuestionItem]:
        """
        Get all questions.

        This method is specific to the memory implementation and not part of
        the QuestionRepository interface.
        """
        with self._lock:
            return list(self._questions.values())

    def clear(self) -> None:
        """Remove all questions."""
        with self._lock:
            self._questions.clear()
