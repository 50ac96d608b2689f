"""
Response domain module.

This module contains the response record, the personalization snapshot and
their stores.
"""

from .model import ResponseRecord, PersonalizationSnapshot
from .repository import ResponseStore, SnapshotStore
from .memory_repository import MemoryResponseStore, MemorySnapshotStore

__all__ = [
    'ResponseRecord',
    'PersonalizationSnapshot',
    'ResponseStore',
    'SnapshotStore',
    'MemoryResponseStore',
    'MemorySnapshotStore',
]
