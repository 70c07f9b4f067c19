"""Rival profiles and the JSON shape they are stored in.

Stored layout of one profile::

    {
        "id": "3f2a...",
        "displayName": "Alice",
        "handles": {"Codeforces": "tourist", "LeetCode": "alice"},
        "stats": {
            "Codeforces": {
                "totalSolved": 412,
                "history": [{"date": "2024-01-01", "count": 2}, ...]
            }
        },
        "manualLogs": [{"date": "2024-01-02", "note": "CSES 1068"}]
    }

Optional fields that are missing or malformed load as "not tracked" / empty.
Profiles written by the first single-platform version
(``{"id", "username", "handle", "platform", "totalSolved", "history"}``) are
read as a profile tracked on that one platform.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    """External judges a rival can be tracked on."""

    CODEFORCES = "Codeforces"
    LEETCODE = "LeetCode"

    @classmethod
    def parse(cls, value: Any) -> Optional["Platform"]:
        """Return the platform for a stored tag (case-insensitive), else None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for platform in cls:
            if platform.value.lower() == wanted:
                return platform
        return None


def _non_negative_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number >= 0 else None


@dataclass(frozen=True)
class DailyActivityRecord:
    date: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "count": self.count}

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["DailyActivityRecord"]:
        if not isinstance(raw, dict):
            return None
        day = raw.get("date")
        count = _non_negative_int(raw.get("count"))
        if not isinstance(day, str) or not day or count is None:
            return None
        return cls(date=day, count=count)


@dataclass
class PlatformStats:
    """Lifetime total plus per-day credited solves for one (rival, platform)."""

    total_solved: int = 0
    history: List[DailyActivityRecord] = field(default_factory=list)

    @classmethod
    def from_day_counts(cls, total_solved: int, day_counts: Dict[str, int]) -> "PlatformStats":
        history = [
            DailyActivityRecord(date=day, count=count)
            for day, count in sorted(day_counts.items())
        ]
        return cls(total_solved=total_solved, history=history)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSolved": self.total_solved,
            "history": [rec.to_dict() for rec in self.history],
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "PlatformStats":
        if not isinstance(raw, dict):
            return cls()
        total = _non_negative_int(raw.get("totalSolved")) or 0
        history = _load_history(raw.get("history"))
        return cls(total_solved=total, history=history)


def _load_history(raw: Any) -> List[DailyActivityRecord]:
    """Parse a stored history list, folding duplicate dates together."""
    if not isinstance(raw, list):
        return []
    by_day: Dict[str, int] = {}
    for item in raw:
        rec = DailyActivityRecord.from_dict(item)
        if rec is None:
            logger.debug("Dropping malformed history record %r", item)
            continue
        by_day[rec.date] = by_day.get(rec.date, 0) + rec.count
    return [DailyActivityRecord(date=d, count=c) for d, c in by_day.items()]


@dataclass(frozen=True)
class ManualLog:
    """A self-reported solve, worth one problem on its date."""

    date: str
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "note": self.note}

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["ManualLog"]:
        if not isinstance(raw, dict) or not isinstance(raw.get("date"), str):
            return None
        note = raw.get("note")
        return cls(date=raw["date"], note=note if isinstance(note, str) else "")


@dataclass
class UserProfile:
    id: Any
    display_name: str
    handles: Dict[Platform, str] = field(default_factory=dict)
    stats: Dict[Platform, PlatformStats] = field(default_factory=dict)
    manual_logs: List[ManualLog] = field(default_factory=list)

    def tracked_platforms(self) -> List[Platform]:
        """Platforms with a non-empty handle, in enum order."""
        return [p for p in Platform if self.handles.get(p)]

    def copy(self) -> "UserProfile":
        return replace(
            self,
            handles=dict(self.handles),
            stats={
                p: PlatformStats(s.total_solved, list(s.history))
                for p, s in self.stats.items()
            },
            manual_logs=list(self.manual_logs),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "handles": {p.value: h for p, h in self.handles.items() if h},
            "stats": {p.value: s.to_dict() for p, s in self.stats.items()},
            "manualLogs": [log.to_dict() for log in self.manual_logs],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "UserProfile":
        if "handles" not in raw and "platform" in raw:
            return cls._from_legacy(raw)

        handles: Dict[Platform, str] = {}
        raw_handles = raw.get("handles")
        if isinstance(raw_handles, dict):
            for tag, handle in raw_handles.items():
                platform = Platform.parse(tag)
                if platform and isinstance(handle, str) and handle:
                    handles[platform] = handle

        stats: Dict[Platform, PlatformStats] = {}
        raw_stats = raw.get("stats")
        if isinstance(raw_stats, dict):
            for tag, payload in raw_stats.items():
                platform = Platform.parse(tag)
                if platform:
                    stats[platform] = PlatformStats.from_dict(payload)

        name = raw.get("displayName")
        return cls(
            id=raw.get("id"),
            display_name=name if isinstance(name, str) else "",
            handles=handles,
            stats=stats,
            manual_logs=_load_manual_logs(raw.get("manualLogs")),
        )

    @classmethod
    def _from_legacy(cls, raw: Dict[str, Any]) -> "UserProfile":
        platform = Platform.parse(raw.get("platform"))
        handle = raw.get("handle") if isinstance(raw.get("handle"), str) else ""
        name = raw.get("username") if isinstance(raw.get("username"), str) else handle
        handles: Dict[Platform, str] = {}
        stats: Dict[Platform, PlatformStats] = {}
        if platform and handle:
            handles[platform] = handle
            stats[platform] = PlatformStats.from_dict(raw)
        return cls(
            id=raw.get("id"),
            display_name=name or "",
            handles=handles,
            stats=stats,
            manual_logs=_load_manual_logs(raw.get("manualLogs")),
        )


def _load_manual_logs(raw: Any) -> List[ManualLog]:
    if not isinstance(raw, list):
        return []
    logs = [ManualLog.from_dict(item) for item in raw]
    return [log for log in logs if log is not None]


def load_profiles(raw: Any) -> List[UserProfile]:
    """Decode the stored profile list, skipping entries that are not objects."""
    if not isinstance(raw, list):
        return []
    return [UserProfile.from_dict(item) for item in raw if isinstance(item, dict)]


def dump_profiles(profiles: List[UserProfile]) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in profiles]


__all__ = [
    "DailyActivityRecord",
    "ManualLog",
    "Platform",
    "PlatformStats",
    "UserProfile",
    "dump_profiles",
    "load_profiles",
]
