"""
Time Helpers

Every timestamp the engine stores or compares is timezone-aware UTC.
Naive datetimes from hosts are taken to be UTC already.
"""

import datetime
from typing import Optional, Union


def utc_now() -> datetime.datetime:
    """Current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def parse_timestamp(value: Union[str, datetime.datetime, None]) -> Optional[datetime.datetime]:
    """
    Parse an ISO-8601 string or datetime into an aware UTC datetime.

    A trailing ``Z`` is accepted. Empty values give None.
    """
    if not value:
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        value = datetime.datetime.fromisoformat(text)
    return as_utc(value)
