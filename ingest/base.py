"""Shared plumbing for the per-platform adapters.

Every adapter turns a canonical handle into :class:`~rivals.models.PlatformStats`.
Subclasses implement :meth:`PlatformAdapter._fetch`, which may raise any
:class:`FetchError`; the public :meth:`PlatformAdapter.fetch` never raises for
those and instead hands back a :class:`FetchResult` carrying the failure, so
callers can leave previously stored stats untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional

import requests

from rivals import config
from rivals.models import Platform, PlatformStats

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Whole-fetch failure; no stats are produced."""


class HandleNotFound(FetchError):
    pass


class TransportFailure(FetchError):
    pass


class MalformedResponse(FetchError):
    pass


class UnparsableTimestamp(ValueError):
    """A single record's timestamp could not be read; only that record is dropped."""


class FetchResult(NamedTuple):
    platform: Platform
    handle: str
    stats: Optional[PlatformStats] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.stats is not None and self.error is None


def local_day(timestamp: Any) -> str:
    """Return the local calendar day (``YYYY-MM-DD``) for epoch *timestamp*.

    Raises :class:`UnparsableTimestamp` for missing, non-numeric, negative or
    out-of-range values. There is deliberately no "now" fallback.
    """
    if timestamp is None or isinstance(timestamp, bool):
        raise UnparsableTimestamp(f"missing timestamp: {timestamp!r}")
    try:
        seconds = float(timestamp)
    except (TypeError, ValueError) as exc:
        raise UnparsableTimestamp(f"not a number: {timestamp!r}") from exc
    if seconds != seconds or seconds < 0:
        raise UnparsableTimestamp(f"out of range: {timestamp!r}")
    try:
        return datetime.fromtimestamp(seconds).date().isoformat()
    except (OverflowError, OSError, ValueError) as exc:
        raise UnparsableTimestamp(f"out of range: {timestamp!r}") from exc


class PlatformAdapter:
    """Fetch and normalise one platform's submission data."""

    platform: Platform

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = config.HTTP_TIMEOUT if timeout is None else timeout

    def fetch(self, handle: str) -> FetchResult:
        if not handle:
            return FetchResult(self.platform, handle, error=HandleNotFound("empty handle"))
        try:
            stats = self._fetch(handle)
        except FetchError as exc:
            logger.warning("%s fetch for %s failed: %s", self.platform.value, handle, exc)
            return FetchResult(self.platform, handle, error=exc)
        except (TypeError, ValueError, OverflowError) as exc:
            err = MalformedResponse(f"unexpected payload shape: {exc}")
            logger.warning("%s fetch for %s failed: %s", self.platform.value, handle, err)
            return FetchResult(self.platform, handle, error=err)
        logger.info(
            "%s: %s has %d solved, %d active days",
            self.platform.value, handle, stats.total_solved, len(stats.history),
        )
        return FetchResult(self.platform, handle, stats=stats)

    def _fetch(self, handle: str) -> PlatformStats:
        raise NotImplementedError

    @staticmethod
    def _decode_json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponse(f"invalid JSON (HTTP {resp.status_code})") from exc


_REGISTRY: Dict[Platform, PlatformAdapter] = {}


def register(adapter: PlatformAdapter) -> PlatformAdapter:
    _REGISTRY[adapter.platform] = adapter
    return adapter


def get_adapter(platform: Platform) -> PlatformAdapter:
    return _REGISTRY[platform]


def default_adapters() -> Dict[Platform, PlatformAdapter]:
    return dict(_REGISTRY)


__all__ = [
    "FetchError",
    "FetchResult",
    "HandleNotFound",
    "MalformedResponse",
    "PlatformAdapter",
    "TransportFailure",
    "UnparsableTimestamp",
    "default_adapters",
    "get_adapter",
    "local_day",
    "register",
]
