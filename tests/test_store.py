import json
import threading
import time

import pytest

from rivals.models import DailyActivityRecord, ManualLog, Platform, PlatformStats, UserProfile, load_profiles
from rivals.store import JsonFileStore, MemoryStore, ProfileRepository

STORED = {
    "id": "u1",
    "displayName": "Alice",
    "handles": {"Codeforces": "alice_cf", "LeetCode": "alice"},
    "stats": {
        "Codeforces": {
            "totalSolved": 12,
            "history": [{"date": "2024-01-01", "count": 2}, {"date": "2024-01-02", "count": 1}],
        }
    },
    "manualLogs": [{"date": "2024-01-03", "note": "cses"}],
}


def test_profile_round_trips_exactly():
    (p,) = load_profiles([STORED])
    assert p.handles == {Platform.CODEFORCES: "alice_cf", Platform.LEETCODE: "alice"}
    assert p.stats[Platform.CODEFORCES].total_solved == 12
    assert p.to_dict() == STORED


def test_missing_and_unknown_fields_default_to_untracked():
    (p,) = load_profiles([{
        "id": 7,
        "handles": {"AtCoder": "x", "Codeforces": ""},
        "stats": {"LeetCode": {"history": [{"date": "2024-01-01", "count": "oops"}, "junk"]}},
        "extra": True,
    }])

    assert p.display_name == ""
    assert p.handles == {}
    assert p.stats[Platform.LEETCODE].total_solved == 0
    assert p.stats[Platform.LEETCODE].history == []
    assert p.manual_logs == []


def test_out_of_range_numbers_default_to_zero_or_are_dropped():
    (p,) = load_profiles(json.loads(
        '[{"id": "a", "stats": {"Codeforces": {"totalSolved": 1e400, '
        '"history": [{"date": "2024-01-01", "count": 1e400}, {"date": "2024-01-02", "count": 3}]}}}]'
    ))

    assert p.stats[Platform.CODEFORCES].total_solved == 0
    assert p.stats[Platform.CODEFORCES].history == [DailyActivityRecord("2024-01-02", 3)]


def test_legacy_single_platform_record():
    legacy = {
        "id": 1700000000000,
        "username": "bob",
        "handle": "bob",
        "platform": "Codeforces",
        "totalSolved": 5,
        "streak": 0,
        "history": [{"date": "2024-01-01", "count": 1}],
        "manualLogs": [{"date": "2024-01-02"}],
    }

    (p,) = load_profiles([legacy])

    assert p.display_name == "bob"
    assert p.handles == {Platform.CODEFORCES: "bob"}
    assert p.stats[Platform.CODEFORCES].history == [DailyActivityRecord("2024-01-01", 1)]
    assert p.manual_logs == [ManualLog("2024-01-02")]


def test_load_ignores_garbage():
    assert load_profiles(None) == []
    assert load_profiles({"not": "a list"}) == []
    assert len(load_profiles([1, "x", {"id": "ok"}])) == 1


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(path)
    store.set("code_rivals_users", [STORED])
    store.set("other", 1)

    assert json.loads(path.read_text())["code_rivals_users"] == [STORED]
    assert JsonFileStore(path).get("code_rivals_users") == [STORED]


def test_json_file_store_tolerates_corruption(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")
    assert JsonFileStore(path).get("code_rivals_users") is None


def test_json_file_store_tolerates_non_utf8_bytes(tmp_path):
    path = tmp_path / "store.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    assert JsonFileStore(path).get("code_rivals_users") is None


def test_repository_add_get_remove(repo):
    repo.add(UserProfile(id="a", display_name="A"))
    repo.add(UserProfile(id="b", display_name="B"))

    assert [p.id for p in repo.all()] == ["a", "b"]
    assert repo.get("b").display_name == "B"
    assert repo.remove("a")
    assert not repo.remove("a")
    assert [p.id for p in repo.all()] == ["b"]

    with pytest.raises(ValueError):
        repo.add(UserProfile(id="b", display_name="again"))


def test_repository_reads_are_copies(repo):
    repo.add(UserProfile(id="a", display_name="A"))

    p = repo.get("a")
    p.display_name = "changed"

    assert repo.get("a").display_name == "A"


def test_repository_update_is_atomic_per_profile(repo):
    repo.add(UserProfile(id="a", display_name="A"))

    def bump(p):
        p.stats[Platform.LEETCODE] = PlatformStats(3, [])
        return p

    updated = repo.update("a", bump)

    assert updated.stats[Platform.LEETCODE].total_solved == 3
    assert repo.get("a").stats[Platform.LEETCODE].total_solved == 3
    with pytest.raises(KeyError):
        repo.update("missing", bump)


def test_numeric_legacy_ids_match_string_lookups():
    repo = ProfileRepository(MemoryStore({"code_rivals_users": [{"id": 17, "displayName": "Old"}]}))
    assert repo.get("17").display_name == "Old"


class SlowStore(MemoryStore):
    """Holds every read open until two readers overlap, widening the read-modify-write gap."""

    def __init__(self):
        super().__init__()
        self.gate = threading.Barrier(2, timeout=0.5)

    def get(self, key):
        value = super().get(key)
        try:
            self.gate.wait()
        except threading.BrokenBarrierError:
            pass
        time.sleep(0.01)
        return value


def test_concurrent_updates_of_different_profiles_both_land():
    store = SlowStore()
    repo = ProfileRepository(MemoryStore(), key="code_rivals_users")
    repo.add(UserProfile(id="a", display_name="A"))
    repo.add(UserProfile(id="b", display_name="B"))
    store.set("code_rivals_users", repo.store.get("code_rivals_users"))
    repo = ProfileRepository(store, key="code_rivals_users")

    def solve(total):
        def apply(p):
            p.stats[Platform.CODEFORCES] = PlatformStats(total, [])
            return p
        return apply

    threads = [
        threading.Thread(target=repo.update, args=("a", solve(1))),
        threading.Thread(target=repo.update, args=("b", solve(2))),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert repo.get("a").stats[Platform.CODEFORCES].total_solved == 1
    assert repo.get("b").stats[Platform.CODEFORCES].total_solved == 2
