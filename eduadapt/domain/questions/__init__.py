"""
Question domain module.

This module contains the question model and the repositories through which
the engine reads a lecture's questions.
"""

from .model import QuestionItem, Difficulty, QuestionType, ClosedForm, OpenForm, AnswerForm
from .repository import QuestionRepository
from .memory_repository import MemoryQuestionRepository

__all__ = [
    'QuestionItem',
    'Difficulty',
    'QuestionType',
    'ClosedForm',
    'OpenForm',
    'AnswerForm',
    'QuestionRepository',
    'MemoryQuestionRepository',
]
