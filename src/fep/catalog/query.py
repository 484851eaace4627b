"""Read-side queries over the catalog."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Callable, Literal, Optional

from fep.db.repository import EventRepository
from fep.models import CanonicalEvent
from fep.utils.time import DEFAULT_TIMEZONE, localize, now_local


Window = Literal["today", "tomorrow", "week", "weekend"]

SATURDAY = 5
SUNDAY = 6


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max, tzinfo=value.tzinfo)


def _next_weekday(value: datetime, weekday: int) -> datetime:
    """Strictly after value: a Saturday asking for Saturday gets the following week."""
    days = (weekday - value.weekday() - 1) % 7 + 1
    return value + timedelta(days=days)


def today_window(now: datetime) -> tuple[datetime, datetime]:
    return start_of_day(now), end_of_day(now)


def tomorrow_window(now: datetime) -> tuple[datetime, datetime]:
    tomorrow = now + timedelta(days=1)
    return start_of_day(tomorrow), end_of_day(tomorrow)


def week_window(now: datetime) -> tuple[datetime, datetime]:
    monday = now - timedelta(days=now.weekday())
    sunday = monday + timedelta(days=6)
    return start_of_day(monday), end_of_day(sunday)


def weekend_window(now: datetime) -> tuple[datetime, datetime]:
    """Upcoming Saturday and Sunday; from today on Saturday; only today on Sunday."""
    weekday = now.weekday()
    if weekday == SATURDAY:
        return start_of_day(now), end_of_day(_next_weekday(now, SUNDAY))
    if weekday == SUNDAY:
        return today_window(now)
    saturday = _next_weekday(now, SATURDAY)
    return start_of_day(saturday), end_of_day(_next_weekday(saturday, SUNDAY))


WINDOWS: dict[str, Callable[[datetime], tuple[datetime, datetime]]] = {
    "today": today_window,
    "tomorrow": tomorrow_window,
    "week": week_window,
    "weekend": weekend_window,
}


class EventQueryService:
    """Windows are computed in the catalog timezone.

    Results always exclude rejected, inactive and duplicate events. Age
    bounds are optional; an event with no bound on a side matches that side.
    """

    def __init__(
        self,
        repo: EventRepository,
        tz_name: str = DEFAULT_TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.repo = repo
        self.tz_name = tz_name
        self.clock = clock or (lambda: now_local(tz_name))

    def _now(self) -> datetime:
        return localize(self.clock(), self.tz_name)

    def window(self, name: Window) -> tuple[datetime, datetime]:
        try:
            compute = WINDOWS[name]
        except KeyError:
            raise ValueError(f"unknown window {name!r}") from None
        return compute(self._now())

    def events_in(
        self,
        name: Window,
        age_min: Optional[int] = None,
        age_max: Optional[int] = None,
        limit: int = 10,
    ) -> list[CanonicalEvent]:
        start, end = self.window(name)
        return self.repo.find_active(start, end, age_min, age_max, limit)

    def today(self, age_min: Optional[int] = None, age_max: Optional[int] = None, limit: int = 10):
        return self.events_in("today", age_min, age_max, limit)

    def tomorrow(self, age_min: Optional[int] = None, age_max: Optional[int] = None, limit: int = 10):
        return self.events_in("tomorrow", age_min, age_max, limit)

    def week(self, age_min: Optional[int] = None, age_max: Optional[int] = None, limit: int = 10):
        return self.events_in("week", age_min, age_max, limit)

    def weekend(self, age_min: Optional[int] = None, age_max: Optional[int] = None, limit: int = 10):
        return self.events_in("weekend", age_min, age_max, limit)

    def new_since(
        self,
        since: datetime,
        age_min: Optional[int] = None,
        age_max: Optional[int] = None,
        limit: int = 20,
    ) -> list[CanonicalEvent]:
        return self.repo.find_created_since(
            localize(since, self.tz_name), age_min, age_max, limit
        )
