"""The Monday-to-Sunday scoring window.

Nothing here is cached: every call reads the clock again, so a ranking taken
just before midnight on Sunday and one taken just after use different weeks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

DateLike = Union[datetime, date, str]


@dataclass(frozen=True)
class WeekWindow:
    start: datetime
    end: datetime

    def contains(self, value: DateLike) -> bool:
        moment = to_datetime(value)
        if moment is None:
            return False
        return self.start <= moment < self.end


def start_of_week(now: Optional[datetime] = None) -> datetime:
    """Local midnight of the most recent Monday (Sunday maps back six days)."""
    now = now or datetime.now()
    monday = now.date() - timedelta(days=now.weekday())
    return datetime.combine(monday, time.min)


def current_window(now: Optional[datetime] = None) -> WeekWindow:
    start = start_of_week(now)
    return WeekWindow(start=start, end=start + timedelta(days=7))


def to_datetime(value: DateLike) -> Optional[datetime]:
    """Read *value* as a naive local datetime; dates mean local midnight."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.combine(date.fromisoformat(value.strip()[:10]), time.min)
        except ValueError:
            return None
    return None


def in_window(value: DateLike, now: Optional[datetime] = None) -> bool:
    return current_window(now).contains(value)


__all__ = ["WeekWindow", "current_window", "in_window", "start_of_week", "to_datetime"]
