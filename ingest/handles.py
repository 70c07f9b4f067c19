"""Turn whatever the user typed (bare handle or profile URL) into a handle."""

import re
from typing import Dict, List, Pattern

from rivals.models import Platform

_PREFIX = r"^(?:https?://)?(?:www\.|m\.)?"
_SUFFIX = r"/?(?:[?#].*)?$"

# Reserved LeetCode paths that are not user profiles
_LEETCODE_RESERVED = r"(?!(?:problems|contest|discuss|explore|problemset|u)(?:[/?#]|$))"

PROFILE_URL_PATTERNS: Dict[Platform, List[Pattern[str]]] = {
    Platform.CODEFORCES: [
        re.compile(_PREFIX + r"codeforces\.com/profile/([^/?#\s]+)" + _SUFFIX, re.IGNORECASE),
    ],
    Platform.LEETCODE: [
        re.compile(_PREFIX + r"leetcode\.(?:com|cn)/u/([^/?#\s]+)" + _SUFFIX, re.IGNORECASE),
        re.compile(
            _PREFIX + r"leetcode\.(?:com|cn)/" + _LEETCODE_RESERVED + r"([^/?#\s]+)" + _SUFFIX,
            re.IGNORECASE,
        ),
    ],
}


def normalize_handle(raw: str, platform: Platform) -> str:
    """Return the canonical handle for *raw* on *platform*.

    Whitespace is trimmed and a matching profile URL is reduced to its handle
    segment; anything else comes back trimmed but otherwise unchanged. An
    empty result means the rival is not tracked on that platform.
    """
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        return ""
    for pattern in PROFILE_URL_PATTERNS.get(platform, []):
        match = pattern.match(text)
        if match:
            return match.group(1).strip()
    return text


__all__ = ["PROFILE_URL_PATTERNS", "normalize_handle"]
