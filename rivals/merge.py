"""Fold per-platform daily histories into one date -> count map."""

from typing import Dict, Iterable

from .models import DailyActivityRecord, UserProfile


def merge_histories(histories: Iterable[Iterable[DailyActivityRecord]]) -> Dict[str, int]:
    """Sum counts per date across *histories*.

    Counts are added, not deduplicated: the same problem solved on two
    platforms is two accomplishments. No histories gives an empty map.
    """
    unified: Dict[str, int] = {}
    for history in histories:
        for rec in history:
            unified[rec.date] = unified.get(rec.date, 0) + rec.count
    return unified


def unified_activity(profile: UserProfile) -> Dict[str, int]:
    """All of *profile*'s stored platform histories plus one per manual log."""
    unified = merge_histories(stats.history for stats in profile.stats.values())
    for log in profile.manual_logs:
        unified[log.date] = unified.get(log.date, 0) + 1
    return unified


__all__ = ["merge_histories", "unified_activity"]
