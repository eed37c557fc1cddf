from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

Clock = Callable[[], datetime]
Timestamp = Union[datetime, str, None]

DEFAULT_MAX_AGE = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    """Normalize a datetime or ISO-8601 string to an aware UTC datetime.

    Naive values are taken as UTC. Returns None for anything unparsable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def needs_refresh(
    last_updated: Timestamp,
    now: Timestamp,
    max_age: timedelta = DEFAULT_MAX_AGE,
) -> bool:
    """True when `last_updated` is at least `max_age` older than `now`.

    Missing or unparsable timestamps count as stale.
    """
    updated_at = parse_timestamp(last_updated)
    current = parse_timestamp(now)
    if updated_at is None or current is None:
        return True
    return current - updated_at >= max_age
