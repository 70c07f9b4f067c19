"""Spot rivals that are probably already tracked.

Display names are free text, so "Gennady K." and "gennady k" should be seen as
the same person. Matching is an exact case-insensitive comparison first, then
RapidFuzz's token-sort ratio. Handles are compared exactly per platform.
"""

from typing import Dict, Iterable, List, Optional

from rapidfuzz import fuzz

from . import config
from .models import Platform, UserProfile


def _is_duplicate(name1: str, name2: str, threshold: int) -> bool:
    """Return True if two names are similar enough to be considered duplicates."""
    if not name1 or not name2:
        return False
    if name1.lower() == name2.lower():
        return True
    return fuzz.token_sort_ratio(name1, name2) >= threshold


def find_similar(
    profiles: Iterable[UserProfile],
    display_name: str,
    handles: Optional[Dict[Platform, str]] = None,
    threshold: Optional[int] = None,
) -> List[UserProfile]:
    """Return existing profiles sharing a handle with, or named like, the candidate."""
    threshold = config.SIMILAR_NAME_THRESHOLD if threshold is None else threshold
    handles = handles or {}
    matches: List[UserProfile] = []
    for profile in profiles:
        same_handle = any(
            h and profile.handles.get(p, "").lower() == h.lower()
            for p, h in handles.items()
        )
        if same_handle or _is_duplicate(display_name, profile.display_name, threshold):
            matches.append(profile)
    return matches


__all__ = ["find_similar"]
