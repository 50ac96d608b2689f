"""
Question Repository Module

This module defines the repository interface through which the engine reads
questions. Lecture and question storage belong to the host application; the
engine only needs lookups by id, by id set and by lecture.
"""

import abc
from typing import Iterable, List, Optional

from .model import QuestionItem


class QuestionRepository(abc.ABC):
    """
    Abstract base class for question repositories.

    Implementations must return a lecture's questions in a stable order,
    because selection breaks score ties by input order.
    """

    @abc.abstractmethod
    def get_by_id(self, question_id: str) -> Optional[QuestionItem]:
        """
        Get a question by its ID.

        Args:
            question_id: The ID of the question to retrieve

        Returns:
            The QuestionItem if found, None otherwise
        """

    @abc.abstractmethod
    def get_many(self, question_ids: Iterable[str]) -> List[QuestionItem]:
        """
        Bulk-load questions by id in one read.

        Args:
            question_ids: IDs to load; duplicates are allowed

        Returns:
            The questions found, each at most once; missing ids are skipped
        """

    @abc.abstractmethod
    def list_for_lecture(self, lecture_id: str, include_unpublished: bool = False) -> List[QuestionItem]:
        """
        List the questions of a lecture.

        Args:
            lecture_id: The lecture to list
            include_unpublished: Whether to include unpublished questions

        Returns:
            Questions in a stable order
        """

    @abc.abstractmethod
    def save(self, question: QuestionItem) -> QuestionItem:
        """
        Create or replace a question.

        Args:
            question: The question to save

        Returns:
            The saved question
        """
