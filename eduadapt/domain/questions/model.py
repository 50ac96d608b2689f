"""
Question Domain Model Module

This module defines the question entities graded and selected by the engine.
A question's answer form is a tagged union: ``ClosedForm`` carries a fixed
option list and the index of the correct option, ``OpenForm`` carries the
canonical free-text answer. Grading dispatches on the form type, never on
which fields happen to be present.
"""

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union
import uuid

from eduadapt.common.clock import as_utc, parse_timestamp, utc_now
from eduadapt.common.exceptions import InvalidInputError
from eduadapt.common.text import normalize_answer


class Difficulty(enum.Enum):
    """Difficulty tier of a question."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union[str, 'Difficulty']) -> 'Difficulty':
        """
        Convert a tier name to a Difficulty.

        Raises:
            InvalidInputError: If the value is not a known tier
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInputError(f"unknown difficulty tier {value!r}", field="difficulty")


class QuestionType(enum.Enum):
    """Answer form of a question."""
    CLOSED_FORM = "closed_form"
    OPEN_FORM = "open_form"


# Names used by authoring tools for each answer form
_TYPE_ALIASES = {
    "closed_form": QuestionType.CLOSED_FORM,
    "multiple_choice": QuestionType.CLOSED_FORM,
    "open_form": QuestionType.OPEN_FORM,
    "short_answer": QuestionType.OPEN_FORM,
    "descriptive": QuestionType.OPEN_FORM,
}


@dataclass(frozen=True)
class ClosedForm:
    """
    A question answered by picking one of a fixed set of options.

    Attributes:
        options: The answer options, in display order
        correct_index: Index of the correct option in ``options``
    """
    options: Tuple[str, ...]
    correct_index: int

    def __post_init__(self):
        object.__setattr__(self, 'options', tuple(self.options))
        if not self.options:
            raise InvalidInputError("closed-form question needs at least one option", field="options")
        # Options that normalize alike would both grade as correct
        if len({normalize_answer(option) for option in self.options}) != len(self.options):
            raise InvalidInputError("closed-form options must be unique after normalization", field="options")
        if not 0 <= self.correct_index < len(self.options):
            raise InvalidInputError(
                f"correct_index {self.correct_index} out of range for {len(self.options)} options",
                field="correct_index"
            )

    question_type = QuestionType.CLOSED_FORM

    @property
    def canonical_answer(self) -> str:
        return self.options[self.correct_index]


@dataclass(frozen=True)
class OpenForm:
    """
    A free-text question graded by fuzzy comparison.

    Attributes:
        canonical_answer: The author-provided correct answer
    """
    canonical_answer: str

    question_type = QuestionType.OPEN_FORM


AnswerForm = Union[ClosedForm, OpenForm]


@dataclass(frozen=True)
class QuestionItem:
    """
    A question belonging to a lecture.

    Questions are immutable; authoring edits produce a new instance through
    ``revise``. Responses refer to questions by id only.

    Attributes:
        question_id: Unique identifier for the question
        lecture_id: Identifier of the lecture the question belongs to
        text: The prompt shown to the subject
        form: ClosedForm or OpenForm answer definition
        difficulty: The difficulty tier
        is_published: Whether the question is visible to subjects
        explanation: Optional explanation shown after answering
        created_at: When the question was created
        updated_at: When the question was last revised
    """
    question_id: str
    lecture_id: str
    text: str
    form: AnswerForm
    difficulty: Difficulty
    is_published: bool = True
    explanation: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        if not isinstance(self.form, (ClosedForm, OpenForm)):
            raise InvalidInputError(f"unsupported answer form {type(self.form).__name__}", field="form")
        object.__setattr__(self, 'difficulty', Difficulty.parse(self.difficulty))
        object.__setattr__(self, 'created_at', as_utc(self.created_at))
        object.__setattr__(self, 'updated_at', as_utc(self.updated_at))

    @classmethod
    def create(cls,
               lecture_id: str,
               text: str,
               form: AnswerForm,
               difficulty: Union[str, Difficulty],
               is_published: bool = True,
               explanation: Optional[str] = None) -> 'QuestionItem':
        """
        Create a new question with a generated ID.

        Args:
            lecture_id: Owning lecture
            text: The question text
            form: ClosedForm or OpenForm answer definition
            difficulty: Difficulty tier or its name
            is_published: Whether subjects can see it
            explanation: Optional explanation

        Returns:
            A new QuestionItem instance
        """
        return cls(
            question_id=str(uuid.uuid4()),
            lecture_id=lecture_id,
            text=text,
            form=form,
            difficulty=Difficulty.parse(difficulty),
            is_published=is_published,
            explanation=explanation
        )

    @property
    def question_type(self) -> QuestionType:
        return self.form.question_type

    @property
    def canonical_answer(self) -> str:
        return self.form.canonical_answer

    def revise(self, **changes: Any) -> 'QuestionItem':
        """
        Return a copy with the given fields changed and ``updated_at`` refreshed.

        The identifier and owning lecture cannot be changed.
        """
        for frozen_field in ('question_id', 'lecture_id'):
            if frozen_field in changes:
                raise InvalidInputError(f"{frozen_field} cannot be revised", field=frozen_field)
        changes.setdefault('updated_at', utc_now())
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the question to a dictionary.

        Returns:
            Dictionary representation of the question
        """
        data = {
            'question_id': self.question_id,
            'lecture_id': self.lecture_id,
            'text': self.text,
            'question_type': self.question_type.value,
            'difficulty': self.difficulty.value,
            'is_published': self.is_published,
            'explanation': self.explanation,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
        if isinstance(self.form, ClosedForm):
            data['options'] = list(self.form.options)
            data['correct_index'] = self.form.correct_index
        else:
            data['canonical_answer'] = self.form.canonical_answer
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuestionItem':
        """
        Create a QuestionItem from a dictionary.

        The answer form is chosen from the explicit ``question_type`` key.
        A closed-form record may give the correct option either as
        ``correct_index`` or as ``answer`` text matching one option.

        Raises:
            InvalidInputError: If the record is missing or has inconsistent fields
        """
        type_name = str(data.get('question_type', '')).strip().lower()
        question_type = _TYPE_ALIASES.get(type_name)
        if question_type is None:
            raise InvalidInputError(f"unknown question_type {type_name!r}", field="question_type")

        if question_type is QuestionType.CLOSED_FORM:
            options = list(data.get('options') or [])
            if 'correct_index' in data:
                correct_index = int(data['correct_index'])
            else:
                answer = data.get('answer')
                if answer not in options:
                    raise InvalidInputError("closed-form answer must be one of the options", field="answer")
                correct_index = options.index(answer)
            form: AnswerForm = ClosedForm(options=tuple(options), correct_index=correct_index)
        else:
            canonical = data.get('canonical_answer', data.get('answer'))
            if canonical is None:
                raise InvalidInputError("open-form question needs a canonical answer", field="canonical_answer")
            form = OpenForm(canonical_answer=str(canonical))

        created_at = parse_timestamp(data.get('created_at')) or utc_now()
        updated_at = parse_timestamp(data.get('updated_at')) or created_at

        return cls(
            question_id=str(data.get('question_id') or uuid.uuid4()),
            lecture_id=str(data.get('lecture_id', '')),
            text=data.get('text', data.get('question', '')),
            form=form,
            difficulty=Difficulty.parse(data.get('difficulty', 'medium')),
            is_published=data.get('is_published') is not False,
            explanation=data.get('explanation'),
            created_at=created_at,
            updated_at=updated_at
        )
