"""
Response Domain Model Module

This module defines the response record persisted for each (subject,
question) pair and the display snapshot of a subject's personalization.
Both refer to questions and subjects by opaque id only.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Tuple

from eduadapt.common.clock import as_utc, parse_timestamp, utc_now

ResponseKey = Tuple[str, str]


@dataclass(frozen=True)
class ResponseRecord:
    """
    A subject's latest answer to one question.

    There is one logical record per (subject, question); resubmitting
    overwrites the answer, correctness and timestamp.

    Attributes:
        subject_id: Opaque identifier of the answering subject
        question_id: Identifier of the answered question
        answer: The submitted answer text
        is_correct: Correctness decided by the grader at submission time
        timestamp: When the answer was submitted, stored as aware UTC
    """
    subject_id: str
    question_id: str
    answer: str
    is_correct: bool
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        object.__setattr__(self, 'timestamp', as_utc(self.timestamp))

    @property
    def key(self) -> ResponseKey:
        return (self.subject_id, self.question_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'subject_id': self.subject_id,
            'question_id': self.question_id,
            'answer': self.answer,
            'is_correct': self.is_correct,
            'timestamp': self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResponseRecord':
        return cls(
            subject_id=str(data['subject_id']),
            question_id=str(data['question_id']),
            answer=data.get('answer', ''),
            is_correct=bool(data.get('is_correct', False)),
            timestamp=parse_timestamp(data.get('timestamp')) or utc_now()
        )


@dataclass(frozen=True)
class PersonalizationSnapshot:
    """
    Display copy of a subject's level and allocation for one lecture.

    Snapshots exist for reporting surfaces only. The engine recomputes
    levels and allocations from responses and never reads a snapshot back.
    """
    subject_id: str
    lecture_id: str
    learning_level: str
    allocation: Dict[str, float]
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        object.__setattr__(self, 'created_at', as_utc(self.created_at))
        object.__setattr__(self, 'updated_at', as_utc(self.updated_at))

    @property
    def key(self) -> Tuple[str, str]:
        return (self.subject_id, self.lecture_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'subject_id': self.subject_id,
            'lecture_id': self.lecture_id,
            'learning_level': self.learning_level,
            'allocation': dict(self.allocation),
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
