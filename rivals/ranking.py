"""Ranking module: weekly score per rival and the ordered leaderboard.

The score is deliberately plain: the number of problems credited inside the
current window, summed across platforms and manual logs. Platforms do not
agree on what a "problem" is (Codeforces credits distinct problems on the day
of first acceptance, LeetCode reports raw daily submissions), and that
difference is carried through as-is.

Ordering uses Python's stable sort, so rivals tied on score (very common at
zero right after they are added) keep the order they were stored in.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from .merge import unified_activity
from .models import UserProfile
from .window import WeekWindow, current_window, to_datetime


@dataclass(frozen=True)
class RankedProfile:
    profile: UserProfile
    weekly_score: int
    streak: int = 0

    @property
    def display_name(self) -> str:
        return self.profile.display_name


def window_total(activity: Dict[str, int], window: WeekWindow) -> int:
    return sum(count for day, count in activity.items() if window.contains(day))


def weekly_score(profile: UserProfile, window: Optional[WeekWindow] = None) -> int:
    """Sum of *profile*'s unified daily counts that fall inside *window*."""
    window = window or current_window()
    return window_total(unified_activity(profile), window)


def current_streak(activity: Dict[str, int], today: Optional[date] = None) -> int:
    """Consecutive active days ending today.

    A streak that ended yesterday still counts while today has no activity
    yet, so it does not read as broken first thing in the morning.
    """
    today = today or date.today()
    active = set()
    for day, count in activity.items():
        moment = to_datetime(day)
        if moment is not None and count > 0:
            active.add(moment.date())

    cursor = today if today in active else today - timedelta(days=1)
    streak = 0
    while cursor in active:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def rank_profiles(profiles: Iterable[UserProfile], now: Optional[datetime] = None) -> List[RankedProfile]:
    """Return every profile with its weekly score, highest score first."""
    now = now or datetime.now()
    window = current_window(now)
    ranked: List[RankedProfile] = []
    for profile in profiles:
        activity = unified_activity(profile)
        ranked.append(
            RankedProfile(
                profile=profile,
                weekly_score=window_total(activity, window),
                streak=current_streak(activity, now.date()),
            )
        )
    return sorted(ranked, key=lambda r: r.weekly_score, reverse=True)


__all__ = ["RankedProfile", "current_streak", "rank_profiles", "weekly_score", "window_total"]
