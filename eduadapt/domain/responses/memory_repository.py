"""
Memory Response Store Module

This module provides in-memory implementations of the response and snapshot
stores, used by tests and by single-process hosts.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .model import PersonalizationSnapshot, ResponseKey, ResponseRecord
from .repository import ResponseStore, SnapshotStore

logger = logging.getLogger(__name__)


class MemoryResponseStore(ResponseStore):
    """
    In-memory response store with per-key atomic upserts.

    Each (subject, question) key has its own lock that serializes the
    read-modify-write of an upsert. The shared table lock is held only for
    single dictionary operations, so writers on different keys never wait
    on each other's upserts.
    """

    def __init__(self, initial_data: Optional[Iterable[ResponseRecord]] = None):
        self._records: Dict[ResponseKey, ResponseRecord] = {}
        self._key_locks: Dict[ResponseKey, threading.Lock] = {}
        self._table_lock = threading.Lock()

        for record in initial_data or []:
            self._records[record.key] = record

    def _lock_for(self, key: ResponseKey) -> threading.Lock:
        with self._table_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def upsert(self, record: ResponseRecord) -> Tuple[ResponseRecord, bool]:
        key = record.key
        with self._lock_for(key):
            with self._table_lock:
                existing = self._records.get(key)

            if existing is None:
                stored = record
            else:
                stored = replace(
                    existing,
                    answer=record.answer,
                    is_correct=record.is_correct,
                    timestamp=record.timestamp
                )

            with self._table_lock:
                self._records[key] = stored

        logger.debug(
            f"{'Updated' if existing else 'Inserted'} response for subject {record.subject_id} "
            f"question {record.question_id}"
        )
        return stored, existing is not None

    def get(self, subject_id: str, question_id: str) -> Optional[ResponseRecord]:
        with self._table_lock:
            return self._records.get((subject_id, question_id))

    def _snapshot(self) -> List[ResponseRecord]:
        with self._table_lock:
            return list(self._records.values())

    def list_for_subject(self, subject_id: str) -> List[ResponseRecord]:
        return [r for r in self._snapshot() if r.subject_id == subject_id]

    def list_for_question(self, question_id: str) -> List[ResponseRecord]:
        return [r for r in self._snapshot() if r.question_id == question_id]

    def list_for_questions(self, question_ids: Iterable[str]) -> List[ResponseRecord]:
        wanted = set(question_ids)
        return [r for r in self._snapshot() if r.question_id in wanted]

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._records)


class MemorySnapshotStore(SnapshotStore):
    """In-memory personalization snapshot store."""

    def __init__(self):
        self._snapshots: Dict[Tuple[str, str], PersonalizationSnapshot] = {}
        self._lock = threading.Lock()

    def upsert(self, snapshot: PersonalizationSnapshot) -> Tuple[PersonalizationSnapshot, bool]:
        with self._lock:
            existing = self._snapshots.get(snapshot.key)
            if existing is not None:
                snapshot = replace(snapshot, created_at=existing.created_at)
            self._snapshots[snapshot.key] = snapshot
        return snapshot, existing is not None

    def get(self, subject_id: str, lecture_id: str) -> Optional[PersonalizationSnapshot]:
        with self._lock:
            return self._snapshots.get((subject_id, lecture_id))

    def list_all(self) -> List[PersonalizationSnapshot]:
        with self._lock:
            return list(self._snapshots.values())

    def delete(self, subject_id: str, lecture_id: str) -> bool:
        with self._lock:
            return self._snapshots.pop((subject_id, lecture_id), None) is not None
