"""
Module for pulling a Codeforces user's submissions and counting solves per day.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

import requests

from rivals import config
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

# Base URL for Codeforces API
CODEFORCES_API_URL = "https://codeforces.com/api"

ProblemKey = Tuple[Any, str]


def _problem_key(problem: Dict[str, Any]) -> Optional[ProblemKey]:
    """Identify a problem by contest id + index (gym/problemset name as fallback)."""
    index = problem.get("index")
    if not isinstance(index, str) or not index:
        return None
    contest = problem.get("contestId")
    if contest is None:
        contest = problem.get("problemsetName") or problem.get("name")
    if isinstance(contest, bool) or not isinstance(contest, (int, str)):
        return None
    return (contest, index)


def summarise_submissions(submissions: List[Dict[str, Any]]) -> PlatformStats:
    """Reduce a ``user.status`` result list to :class:`PlatformStats`.

    A problem counts once, on the day of its earliest accepted submission in
    *submissions*. Accepted submissions whose timestamp cannot be read still
    count toward ``total_solved`` but contribute no day.
    """
    solved = set()
    first_accepted: Dict[ProblemKey, float] = {}

    for sub in submissions:
        if not isinstance(sub, dict) or sub.get("verdict") != "OK":
            continue
        problem = sub.get("problem")
        key = _problem_key(problem) if isinstance(problem, dict) else None
        if key is None:
            logger.debug("Skipping accepted submission without problem id: %r", sub.get("id"))
            continue
        solved.add(key)

        ts = sub.get("creationTimeSeconds")
        try:
            local_day(ts)
        except UnparsableTimestamp as exc:
            logger.debug("Dropping submission %r from history: %s", sub.get("id"), exc)
            continue
        ts = float(ts)
        if key not in first_accepted or ts < first_accepted[key]:
            first_accepted[key] = ts

    day_counts: Dict[str, int] = {}
    for ts in first_accepted.values():
        day = local_day(ts)
        day_counts[day] = day_counts.get(day, 0) + 1

    return PlatformStats.from_day_counts(len(solved), day_counts)


class CodeforcesAdapter(PlatformAdapter):
    platform = Platform.CODEFORCES

    def __init__(self, timeout: Optional[float] = None, count: Optional[int] = None) -> None:
        super().__init__(timeout)
        self.count = config.CF_SUBMISSION_COUNT if count is None else count

    def _fetch(self, handle: str) -> PlatformStats:
        endpoint = f"{CODEFORCES_API_URL}/user.status"
        params: Dict[str, Any] = {"handle": handle}
        if self.count:
            params.update({"from": 1, "count": self.count})

        try:
            logger.debug("Requesting %s for %s", endpoint, handle)
            resp = requests.get(endpoint, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportFailure(str(exc)) from exc
        logger.debug("Codeforces response status %s", resp.status_code)

        # Codeforces reports a missing handle as HTTP 400 with a JSON body
        if resp.status_code >= 500:
            raise TransportFailure(f"HTTP {resp.status_code}")
        data = self._decode_json(resp)
        if not isinstance(data, dict):
            raise MalformedResponse("expected a JSON object")

        if data.get("status") != "OK":
            comment = str(data.get("comment", ""))
            if "not found" in comment.lower():
                raise HandleNotFound(comment)
            if resp.status_code >= 400:
                raise TransportFailure(f"HTTP {resp.status_code}: {comment}")
            raise MalformedResponse(f"unexpected API status {data.get('status')!r}")

        result = data.get("result")
        if not isinstance(result, list):
            raise MalformedResponse("missing submission list")
        return summarise_submissions(result)


register(CodeforcesAdapter())

__all__ = ["CODEFORCES_API_URL", "CodeforcesAdapter", "summarise_submissions"]
