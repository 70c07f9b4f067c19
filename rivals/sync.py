"""Operations that change the rival collection: add, edit, remove, log, sync.

Platform fetches are independent and I/O bound, so a rival's platforms are
fetched concurrently, and "sync everyone" runs one sync per rival on a bounded
thread pool. Results are applied through :meth:`ProfileRepository.update`, so
each platform's stats are replaced on success and left alone on failure.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from tqdm import tqdm

from ingest import FetchError, FetchResult, default_adapters, normalize_handle
from ingest.base import PlatformAdapter

from . import config
from .models import ManualLog, Platform, UserProfile
from .store import ProfileRepository

logger = logging.getLogger(__name__)

Adapters = Mapping[Platform, PlatformAdapter]


@dataclass
class SyncReport:
    profile_id: Any
    results: Dict[Platform, FetchResult] = field(default_factory=dict)
    applied: List[Platform] = field(default_factory=list)

    @property
    def failures(self) -> Dict[Platform, FetchError]:
        return {p: r.error for p, r in self.results.items() if r.error is not None}


@dataclass
class AddResult:
    profile: Optional[UserProfile]
    failures: Dict[Platform, FetchError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.profile is not None


def normalize_handles(raw_handles: Mapping[Platform, str]) -> Dict[Platform, str]:
    """Canonical handles for every platform given, empty ones dropped."""
    handles = {p: normalize_handle(raw, p) for p, raw in raw_handles.items()}
    return {p: h for p, h in handles.items() if h}


def fetch_platforms(handles: Mapping[Platform, str], adapters: Optional[Adapters] = None) -> Dict[Platform, FetchResult]:
    """Fetch every (platform, handle) pair concurrently.

    One platform failing never blocks or invalidates another.
    """
    adapters = adapters if adapters is not None else default_adapters()
    jobs = {p: h for p, h in handles.items() if h and p in adapters}
    if not jobs:
        return {}

    results: Dict[Platform, FetchResult] = {}
    with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
        futures = {pool.submit(adapters[p].fetch, h): p for p, h in jobs.items()}
        for fut in as_completed(futures):
            results[futures[fut]] = fut.result()
    return results


def _apply_results(results: Dict[Platform, FetchResult], applied: List[Platform]):
    def apply(profile: UserProfile) -> UserProfile:
        for platform, result in results.items():
            if not result.ok:
                continue
            # Handle edited while the fetch was in flight: result is stale
            if profile.handles.get(platform) != result.handle:
                logger.info("Discarding %s result for %s: handle changed", platform.value, profile.id)
                continue
            profile.stats[platform] = result.stats
            applied.append(platform)
        return profile

    return apply


def sync_rival(repo: ProfileRepository, profile_id: Any, adapters: Optional[Adapters] = None) -> SyncReport:
    """Refresh every tracked platform of one rival.

    Raises :class:`KeyError` for an unknown id. A rival removed while its
    fetches were in flight is skipped and the results are discarded.
    """
    profile = repo.get(profile_id)
    if profile is None:
        raise KeyError(profile_id)

    report = SyncReport(profile_id=profile_id)
    report.results = fetch_platforms(profile.handles, adapters)
    try:
        repo.update(profile_id, _apply_results(report.results, report.applied))
    except KeyError:
        logger.info("Rival %s was removed during sync; results discarded", profile_id)
        report.applied.clear()
    return report


def sync_all(
    repo: ProfileRepository,
    adapters: Optional[Adapters] = None,
    max_workers: Optional[int] = None,
    progress: bool = False,
) -> List[SyncReport]:
    """Sync every stored rival, at most *max_workers* at a time."""
    ids = [p.id for p in repo.all()]
    if not ids:
        return []
    workers = max(1, min(max_workers or config.MAX_WORKERS, len(ids)))
    logger.info("Syncing %d rivals (%d workers)", len(ids), workers)

    reports: List[SyncReport] = []
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(sync_rival, repo, pid, adapters): pid for pid in ids}
        with tqdm(total=len(futures), desc="Syncing rivals", unit="rival", disable=not progress) as pbar:
            for fut in as_completed(futures):
                pbar.update(1)
                try:
                    reports.append(fut.result())
                except KeyError:
                    logger.info("Rival %s was removed before its sync started", futures[fut])
    return reports


def add_rival(
    repo: ProfileRepository,
    display_name: str,
    raw_handles: Mapping[Platform, str],
    adapters: Optional[Adapters] = None,
) -> AddResult:
    """Create a rival if at least one of its handles can be fetched.

    Nothing is stored when no handle is given or every fetch fails; the
    failures are returned instead.
    """
    handles = normalize_handles(raw_handles)
    if not handles:
        return AddResult(profile=None)

    results = fetch_platforms(handles, adapters)
    failures = {p: r.error for p, r in results.items() if r.error is not None}
    stats = {p: r.stats for p, r in results.items() if r.ok}
    if not stats:
        logger.warning("Not adding %s: no platform could be fetched", display_name)
        return AddResult(profile=None, failures=failures)

    name = display_name.strip() or next(iter(handles.values()))
    profile = UserProfile(id=uuid.uuid4().hex, display_name=name, handles=handles, stats=stats)
    repo.add(profile)
    return AddResult(profile=profile, failures=failures)


def edit_rival(
    repo: ProfileRepository,
    profile_id: Any,
    display_name: Optional[str] = None,
    raw_handles: Optional[Mapping[Platform, str]] = None,
) -> UserProfile:
    """Rename a rival and/or change handles; a changed handle drops its old stats."""

    def apply(profile: UserProfile) -> UserProfile:
        if display_name is not None and display_name.strip():
            profile.display_name = display_name.strip()
        for platform, raw in (raw_handles or {}).items():
            handle = normalize_handle(raw, platform)
            if handle == profile.handles.get(platform, ""):
                continue
            profile.stats.pop(platform, None)
            if handle:
                profile.handles[platform] = handle
            else:
                profile.handles.pop(platform, None)
        return profile

    return repo.update(profile_id, apply)


def remove_rival(repo: ProfileRepository, profile_id: Any) -> bool:
    return repo.remove(profile_id)


def log_manual_solve(
    repo: ProfileRepository,
    profile_id: Any,
    day: Optional[date] = None,
    note: str = "",
) -> UserProfile:
    day = day or date.today()

    def apply(profile: UserProfile) -> UserProfile:
        profile.manual_logs.append(ManualLog(date=day.isoformat(), note=note))
        return profile

    return repo.update(profile_id, apply)


__all__ = [
    "AddResult",
    "SyncReport",
    "add_rival",
    "edit_rival",
    "fetch_platforms",
    "log_manual_solve",
    "normalize_handles",
    "remove_rival",
    "sync_all",
    "sync_rival",
]
