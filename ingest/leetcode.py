"""LeetCode profile ingestion.

This module pulls a user's lifetime solve count and submission calendar via
the public GraphQL endpoint. LeetCode sits behind Cloudflare, so requests go
through a single shared ``cloudscraper`` session.

The calendar maps a day's epoch timestamp (as a string) to the number of
submissions made that day. Those counts are kept as reported: unlike the
Codeforces adapter they are *not* deduplicated per problem, since the API
does not say which problems the submissions were for.

Usage
-----
>>> from ingest.leetcode import LeetCodeAdapter
>>> result = LeetCodeAdapter().fetch("alice")
>>> result.stats.total_solved if result.ok else result.error
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import cloudscraper
import requests
from cloudscraper.exceptions import CloudflareException

from rivals.models import Platform, PlatformStats

from .base import (
    HandleNotFound,
    MalformedResponse,
    PlatformAdapter,
    TransportFailure,
    UnparsableTimestamp,
    local_day,
    register,
)

logger = logging.getLogger(__name__)

_GRAPHQL_ENDPOINT = "https://leetcode.com/graphql"

_PROFILE_QUERY = """
query userPublicProfile($username: String!) {
  matchedUser(username: $username) {
    submitStats {
      acSubmissionNum {
        difficulty
        count
      }
    }
    submissionCalendar
  }
}
"""

# Single scraper instance (handles Cloudflare automatically)
scraper = cloudscraper.create_scraper()


def _total_solved(user: Dict[str, Any]) -> int:
    stats = user.get("submitStats") or {}
    rows = stats.get("acSubmissionNum") if isinstance(stats, dict) else None
    if not isinstance(rows, list):
        raise MalformedResponse("missing acSubmissionNum")
    for row in rows:
        if isinstance(row, dict) and str(row.get("difficulty", "")).lower() == "all":
            try:
                return max(0, int(row.get("count") or 0))
            except (TypeError, ValueError, OverflowError) as exc:
                raise MalformedResponse(f"bad total count {row.get('count')!r}") from exc
    raise MalformedResponse("no 'All' difficulty bucket")


def _parse_calendar(raw: Any) -> Dict[str, Any]:
    """The calendar arrives as a JSON-encoded string; some mirrors send an object."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError as exc:
            raise MalformedResponse("submissionCalendar is not valid JSON") from exc
        if isinstance(decoded, dict):
            return decoded
    raise MalformedResponse("submissionCalendar is not a mapping")


def summarise_calendar(total_solved: int, calendar: Dict[str, Any]) -> PlatformStats:
    """Bucket raw calendar counts by local day; unreadable entries are dropped."""
    day_counts: Dict[str, int] = {}
    for ts, count in calendar.items():
        try:
            day = local_day(ts)
        except UnparsableTimestamp as exc:
            logger.debug("Dropping calendar entry %r: %s", ts, exc)
            continue
        try:
            n = int(count)
        except (TypeError, ValueError, OverflowError):
            logger.debug("Dropping calendar entry %r with count %r", ts, count)
            continue
        if n <= 0:
            continue
        day_counts[day] = day_counts.get(day, 0) + n
    return PlatformStats.from_day_counts(total_solved, day_counts)


class LeetCodeAdapter(PlatformAdapter):
    platform = Platform.LEETCODE

    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None) -> None:
        super().__init__(timeout)
        self.session = session or scraper

    def _fetch(self, handle: str) -> PlatformStats:
        try:
            resp = self.session.post(
                _GRAPHQL_ENDPOINT,
                json={"query": _PROFILE_QUERY, "variables": {"username": handle}},
                headers={"Content-Type": "application/json", "Referer": "https://leetcode.com"},
                timeout=self.timeout,
            )
        except (requests.RequestException, CloudflareException) as exc:
            raise TransportFailure(str(exc)) from exc
        logger.debug("LeetCode response status %s", resp.status_code)

        if resp.status_code != 200:
            raise TransportFailure(f"HTTP {resp.status_code}")
        data = self._decode_json(resp)
        payload = data.get("data") if isinstance(data, dict) else None
        if not isinstance(payload, dict):
            raise MalformedResponse("missing 'data' object")

        user = payload.get("matchedUser")
        if user is None:
            raise HandleNotFound(f"no LeetCode user {handle!r}")
        if not isinstance(user, dict):
            raise MalformedResponse("matchedUser is not an object")

        total = _total_solved(user)
        calendar = _parse_calendar(user.get("submissionCalendar"))
        return summarise_calendar(total, calendar)


register(LeetCodeAdapter())

__all__ = ["LeetCodeAdapter", "summarise_calendar"]
