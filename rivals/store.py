"""Persistence for the rival list.

The list lives under one fixed key of an opaque key-value store. The default
backend is a pretty-printed JSON file:

    {
        "code_rivals_users": [ {profile}, {profile}, ... ]
    }

All writes go through :class:`ProfileRepository`, which serialises every
read-modify-write behind one lock so concurrent syncs for different rivals
cannot overwrite each other's results.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

from . import config
from .models import UserProfile, dump_profiles, load_profiles

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class JsonFileStore:
    """Key-value store backed by a single JSON file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else config.STORE_PATH

    def _load_catalog(self) -> Dict[str, Any]:
        """Return the full JSON catalog ({} if missing or corrupted)."""
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except ValueError:
                logger.warning("Ignoring corrupted store at %s", self.path)
                return {}
            if isinstance(data, dict):
                return data
        return {}

    def _save_catalog(self, catalog: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(catalog, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> Any:
        return self._load_catalog().get(key)

    def set(self, key: str, value: Any) -> None:
        catalog = self._load_catalog()
        catalog[key] = value
        self._save_catalog(catalog)


class MemoryStore:
    """In-process store; values are copied through JSON like the file store."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, str] = {k: json.dumps(v) for k, v in (initial or {}).items()}

    def get(self, key: str) -> Any:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)


def _same_id(a: Any, b: Any) -> bool:
    # Legacy records use numeric ids; the CLI always passes strings
    return a == b or str(a) == str(b)


class ProfileRepository:
    """The rival collection, with atomic per-profile updates.

    Every read returns fresh copies decoded from the store, so no two callers
    ever share a :class:`UserProfile` instance.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, key: Optional[str] = None) -> None:
        self.store = store if store is not None else JsonFileStore()
        self.key = key or config.STORAGE_KEY
        self._lock = threading.RLock()

    def _read(self) -> List[UserProfile]:
        return load_profiles(self.store.get(self.key))

    def _write(self, profiles: List[UserProfile]) -> None:
        self.store.set(self.key, dump_profiles(profiles))

    def all(self) -> List[UserProfile]:
        with self._lock:
            return self._read()

    def get(self, profile_id: Any) -> Optional[UserProfile]:
        with self._lock:
            for profile in self._read():
                if _same_id(profile.id, profile_id):
                    return profile
        return None

    def add(self, profile: UserProfile) -> UserProfile:
        with self._lock:
            profiles = self._read()
            if any(_same_id(p.id, profile.id) for p in profiles):
                raise ValueError(f"duplicate profile id {profile.id!r}")
            profiles.append(profile.copy())
            self._write(profiles)
        logger.info("Added rival %s (%s)", profile.display_name, profile.id)
        return profile

    def remove(self, profile_id: Any) -> bool:
        with self._lock:
            profiles = self._read()
            kept = [p for p in profiles if not _same_id(p.id, profile_id)]
            if len(kept) == len(profiles):
                return False
            self._write(kept)
        logger.info("Removed rival %s", profile_id)
        return True

    def update(self, profile_id: Any, fn: Callable[[UserProfile], UserProfile]) -> UserProfile:
        """Apply *fn* to the stored profile and write the result back atomically.

        Raises :class:`KeyError` if no profile has *profile_id*.
        """
        with self._lock:
            profiles = self._read()
            for idx, profile in enumerate(profiles):
                if _same_id(profile.id, profile_id):
                    updated = fn(profile)
                    updated.id = profile.id
                    profiles[idx] = updated
                    self._write(profiles)
                    return updated.copy()
        raise KeyError(profile_id)


__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore", "ProfileRepository"]
