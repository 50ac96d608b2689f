"""
Key Builder Module

Analytics cache keys are ``namespace:part:part``. Parts are percent-escaped
so an id containing ``:`` can never make one subject's prefix match another
subject's keys.
"""

from typing import Any
from urllib.parse import quote

PROFILE_NAMESPACE = "profile"
LECTURE_SUMMARY_NAMESPACE = "lecture_summary"


class KeyBuilder:
    """Builds namespaced cache keys for derived analytics."""

    @staticmethod
    def _part(part: Any) -> str:
        return "null" if part is None else quote(str(part), safe="")

    @staticmethod
    def build(namespace: str, *parts: Any) -> str:
        """
        Build a key from a namespace and parts.

        Args:
            namespace: Leading key segment
            *parts: Remaining segments, converted to escaped strings

        Returns:
            A colon-separated key string
        """
        return ":".join([namespace] + [KeyBuilder._part(part) for part in parts])

    @staticmethod
    def prefix(namespace: str, *parts: Any) -> str:
        """Build a prefix matching every key that extends ``parts``."""
        return KeyBuilder.build(namespace, *parts) + ":"

    @staticmethod
    def profile_key(subject_id: str, lecture_id: str) -> str:
        return KeyBuilder.build(PROFILE_NAMESPACE, subject_id, lecture_id)

    @staticmethod
    def subject_prefix(subject_id: str) -> str:
        """Prefix of every cached profile belonging to ``subject_id``."""
        return KeyBuilder.prefix(PROFILE_NAMESPACE, subject_id)

    @staticmethod
    def lecture_summary_key(lecture_id: str) -> str:
        return KeyBuilder.build(LECTURE_SUMMARY_NAMESPACE, lecture_id)
