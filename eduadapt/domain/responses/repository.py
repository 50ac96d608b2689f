"""
Response Repository Module

This module defines the store interfaces the engine depends on for answers
and for personalization snapshots. Storage technology is the host's choice.
"""

import abc
from typing import Iterable, List, Optional, Tuple

from .model import PersonalizationSnapshot, ResponseRecord


class ResponseStore(abc.ABC):
    """
    Abstract base class for response stores.

    ``upsert`` must be atomic per (subject, question) key. Writes to
    different keys must not block each other. Concurrent writes to the
    same key resolve last-writer-wins.
    """

    @abc.abstractmethod
    def upsert(self, record: ResponseRecord) -> Tuple[ResponseRecord, bool]:
        """
        Insert a record or overwrite the existing one for its key.

        Args:
            record: The record to store

        Returns:
            Tuple of (stored record, True if an existing record was overwritten)
        """

    @abc.abstractmethod
    def get(self, subject_id: str, question_id: str) -> Optional[ResponseRecord]:
        """Get the record for one (subject, question) key."""

    @abc.abstractmethod
    def list_for_subject(self, subject_id: str) -> List[ResponseRecord]:
        """Bulk-read every record of a subject."""

    @abc.abstractmethod
    def list_for_question(self, question_id: str) -> List[ResponseRecord]:
        """Bulk-read every record for a question."""

    @abc.abstractmethod
    def list_for_questions(self, question_ids: Iterable[str]) -> List[ResponseRecord]:
        """Bulk-read every record for a set of questions, e.g. a lecture's."""


class SnapshotStore(abc.ABC):
    """Abstract base class for personalization snapshot stores."""

    @abc.abstractmethod
    def upsert(self, snapshot: PersonalizationSnapshot) -> Tuple[PersonalizationSnapshot, bool]:
        """
        Insert or update the snapshot for its (subject, lecture) key.

        An update keeps the original ``created_at``.

        Returns:
            Tuple of (stored snapshot, True if an existing snapshot was updated)
        """

    @abc.abstractmethod
    def get(self, subject_id: str, lecture_id: str) -> Optional[PersonalizationSnapshot]:
        """Get the snapshot for a subject and lecture."""

    @abc.abstractmethod
    def list_all(self) -> List[PersonalizationSnapshot]:
        """List every snapshot."""

    @abc.abstractmethod
    def delete(self, subject_id: str, lecture_id: str) -> bool:
        """Delete a snapshot, returning True if one existed."""
