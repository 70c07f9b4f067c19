from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from ingest.base import HandleNotFound, PlatformAdapter
from rivals.models import Platform, PlatformStats, UserProfile
from rivals.store import MemoryStore, ProfileRepository


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self.text is not None:
            raise ValueError("not JSON")
        return self._payload


class StubAdapter(PlatformAdapter):
    """Adapter answering from a dict of handle -> PlatformStats (missing = not found)."""

    def __init__(self, platform: Platform, answers: Dict[str, PlatformStats]):
        super().__init__(timeout=1)
        self.platform = platform
        self.answers = answers
        self.calls: List[str] = []

    def _fetch(self, handle: str) -> PlatformStats:
        self.calls.append(handle)
        if handle not in self.answers:
            raise HandleNotFound(handle)
        return self.answers[handle]


def ts(*args: int) -> int:
    """Epoch seconds for a local datetime."""
    return int(datetime(*args).timestamp())


def profile(pid: str, name: str, histories: Optional[Dict[Platform, Dict[str, int]]] = None) -> UserProfile:
    p = UserProfile(id=pid, display_name=name)
    for platform, days in (histories or {}).items():
        p.handles[platform] = name.lower()
        p.stats[platform] = PlatformStats.from_day_counts(sum(days.values()), days)
    return p


@pytest.fixture
def repo() -> ProfileRepository:
    return ProfileRepository(MemoryStore(), key="code_rivals_users")
