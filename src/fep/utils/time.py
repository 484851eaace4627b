"""Time helpers."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


DEFAULT_TIMEZONE = "Europe/Prague"


def localize(value: datetime, tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Return an aware datetime in the given zone.

    Naive values are taken to already be wall-clock time in that zone.
    """
    tz = ZoneInfo(tz_name)
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def now_local(tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Current time in the catalog timezone."""
    return datetime.now(ZoneInfo(tz_name))
