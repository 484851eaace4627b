"""Time-based catalog maintenance."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from fep.db.repository import EventRepository
from fep.utils.logging import get_logger
from fep.utils.time import DEFAULT_TIMEZONE, localize, now_local


logger = get_logger(__name__)


def deactivate_past(
    repo: EventRepository,
    now: Optional[datetime] = None,
    grace_hours: int = 0,
    tz_name: str = DEFAULT_TIMEZONE,
) -> int:
    """Mark events that ended more than grace_hours ago inactive.

    Events without an end time are judged by their start time.
    """
    current = localize(now, tz_name) if now is not None else now_local(tz_name)
    cutoff = current - timedelta(hours=max(0, grace_hours))
    count = repo.deactivate_before(cutoff)
    logger.info("lifecycle.deactivated count=%s cutoff=%s", count, cutoff.isoformat())
    return count
